from setuptools import setup, find_packages

setup(
    name="hunk_review",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "pyyaml",
        "textual",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "hunkreview=hunk_review.cli:main",
        ],
    },
    author="Uday Kanth",
    description="Hunk-by-hunk review of unified diffs against a working copy.",
)
