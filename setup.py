"""Setup configuration for the Franchise Comms API."""

from setuptools import setup, find_packages

# Read the README file
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="franchisecomms",
    version="1.0.0",
    author="Franchise Comms Team",
    description="Multi-tenant franchise communications API",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="MIT",
    packages=find_packages(where="src", exclude=["tests", "tests.*"]),
    package_dir={"": "src"},
    py_modules=["main"],
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Framework :: FastAPI",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.10",
    install_requires=[
        # Core web framework
        "fastapi>=0.109.0",
        "uvicorn[standard]>=0.25.0",
        "pydantic>=2.5.0",
        "pydantic-settings>=2.1.0",
        # Database
        "sqlalchemy>=2.0.0",
        "asyncpg>=0.29.0",
        "alembic>=1.13.0",
        "greenlet>=3.0.0",
        # HTTP (Supabase Storage)
        "httpx>=0.25.0",
        # Auth/Security
        "python-jose[cryptography]>=3.3.0",
        "cryptography>=41.0.0",
        # Utilities
        "python-multipart>=0.0.6",
        "email-validator>=2.1.0",
        "python-dateutil>=2.8.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.23.0",
            "pytest-cov>=4.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "franchisecomms=main:main",
        ],
    },
    keywords=[
        "franchise",
        "communications",
        "multi-tenant",
        "fastapi",
        "supabase",
    ],
)
