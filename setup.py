from setuptools import setup, find_packages

setup(
    name="requestguard",
    version="0.1.0",
    packages=find_packages(include=["requestguard", "requestguard.*"]),
    python_requires=">=3.11",
    install_requires=[
        "starlette",
        "pydantic>=2",
        "pydantic-settings>=2",
    ],
    extras_require={
        "test": ["pytest", "pytest-asyncio", "fastapi", "httpx"],
    },
)
