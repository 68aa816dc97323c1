from setuptools import setup, find_packages

setup(
    name="webProblem",
    version="0.1.0",
    description="Problem details for HTTP APIs, with exceptions that carry them",
    packages=find_packages(include=["webProblem", "webProblem.*", "service", "service.*"]),
    python_requires=">=3.10",
    install_requires=[
        "pydantic>=2.0",
        "lxml>=4.5",
        "requests>=2.31.0",
        "click>=8.0",
        "PyYAML>=6.0",
        "fastapi>=0.85.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "httpx>=0.24",
        ],
    },
    entry_points={
        "console_scripts": ["webProblem=webProblem.cli.__main__:main"],
    },
    license="MIT",
)
