"""Setup script for the Injoyplan API."""
from setuptools import setup, find_namespace_packages

setup(
    name="injoyplan-api",
    version="1.0.0",
    description="REST backend for the Injoyplan events and social platform",
    packages=find_namespace_packages(include=["injoyplan", "injoyplan.*"]),
    package_data={"injoyplan.templates": ["*.html"]},
    python_requires=">=3.11",
    install_requires=[
        "fastapi>=0.110",
        "uvicorn>=0.27",
        "sqlalchemy>=2.0",
        "pydantic>=2.5",
        "pydantic-settings>=2.1",
        "python-multipart>=0.0.9",
        "aiohttp>=3.9",
        "jinja2>=3.1",
        "pandas>=2.1",
        "openpyxl>=3.1",
        "tzdata",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
            "httpx>=0.26",
        ],
    },
)
