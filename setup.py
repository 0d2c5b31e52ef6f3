from setuptools import setup, find_packages

setup(
    name="blog-site-builder",
    version="0.2.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "markdown>=3.4.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "build-blog=blogsite.build:main",
        ],
    },
    python_requires=">=3.10",
)
