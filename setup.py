#!/usr/bin/env python3
"""
Setup script for Award Watch
"""

from setuptools import setup

setup(
    name="awardwatch",
    version="1.0.0",
    description="Audit Respect1155 on-chain mints against the ornode award database",
    author="ordao",
    package_dir={"": "src"},
    py_modules=[
        "audit_models",
        "award_auditor",
        "award_schema",
        "award_store",
        "config_manager",
        "denomination_resolver",
        "logger_utils",
        "mint_scanner",
        "reconciler",
        "report_renderer",
        "respect_ledger",
        "rpc_failover",
        "token_id_codec",
    ],
    install_requires=[
        "web3>=6.0.0,<7.0.0",
        "eth-abi>=4.0.0,<5.0.0",
        "python-dotenv>=1.0.0",
        "pymongo>=4.0.0",
        "pydantic>=2.0.0,<3.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "awardwatch=award_auditor:main",
        ],
    },
    python_requires=">=3.8",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)
