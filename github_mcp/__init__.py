# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
GitHub MCP Server

Exposes GitHub REST API operations as MCP tools over JSON-RPC (HTTP),
a server-sent event stream, and stdio.
"""

__version__ = "1.0.0"
