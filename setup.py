# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Setup configuration for the GitHub MCP Server
"""

from setuptools import setup, find_packages

setup(
    name="github-mcp-server",
    version="1.0.0",
    description="GitHub Model Context Protocol server (JSON-RPC over HTTP, SSE and stdio)",
    author="Jason Cafarelli",
    packages=find_packages(include=["github_mcp", "github_mcp.*"]),
    python_requires=">=3.9",
    install_requires=[
        "fastapi>=0.110.0",
        "uvicorn>=0.27.0",
        "pydantic>=2.5.0",
        "httpx>=0.26.0",
        "PyYAML>=6.0",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.23.0",
        ],
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.23.0",
        ]
    },
    entry_points={
        "console_scripts": [
            "github-mcp-server=github_mcp.__main__:main",
        ]
    },
)
