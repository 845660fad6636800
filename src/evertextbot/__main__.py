from evertextbot.cli import main

main()
