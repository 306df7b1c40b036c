from setuptools import setup, find_packages


setup(
    name="packfile",
    version="0.1",
    packages=find_packages(include=["packfile", "packfile.*"]),
    description="Reader, builder and CLI for flat offset-indexed PAK archives.",
    author="vercingetorx",
    python_requires=">=3.8",
    install_requires=[],
    entry_points={
        "console_scripts": [
            "packfile=packfile.cli:main",
        ]
    },
)
