# setup.py
from setuptools import setup, find_packages

setup(
    name="textcon",
    version="0.4.0",
    description="Expand {{ @path }} references in text templates into file contents and directory trees",
    python_requires=">=3.9",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "pathspec>=0.11,<1.0",
        "tiktoken>=0.5",
    ],
    extras_require={
        "test": [
            "pytest>=7",
        ],
    },
    entry_points={
        'console_scripts': [
            'textcon=textcon.main:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
