# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Autonomous session driver for the EverText terminal game."""

__version__ = "0.1.0"
