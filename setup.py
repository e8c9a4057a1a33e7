from setuptools import setup, find_packages

setup(
    name="smart-edit",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "pyyaml",
        "mcp>=1.9,<2",
        "pydantic>=2.0",
        # Post-edit syntax check
        "tree-sitter>=0.22",
        "tree-sitter-python",
        "tree-sitter-javascript",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "smart-edit=smart_edit.cli:main",
        ],
    },
    description="Fuzzy code location and patch reconciliation engine for coding agents.",
)
