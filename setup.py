"""Setup configuration for TripWatch."""

from setuptools import setup, find_packages

with open("docs/README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="tripwatch",
    version="0.1.0",
    description="Unattended open-time trip monitor with rule-based alerts and pickups",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    classifiers=[
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Development Status :: 3 - Alpha",
        "Intended Audience :: End Users/Desktop",
        "Topic :: Desktop Environment",
        "Topic :: System :: Monitoring",
    ],
    python_requires=">=3.8",
    install_requires=[
        "mss>=9.0.0",
        "pyautogui>=0.9.54",
        "pyperclip>=1.8.2",
        "pynput>=1.7.6",
        "sounddevice>=0.4.6",
        "soundfile>=0.12.1",
    ],
    extras_require={
        "dev": ["pytest>=6.0", "black", "flake8"],
    },
)
