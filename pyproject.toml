[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "lanedash"
version = "0.1.0"
description = "Tilt-steered car game for a Linux board with a framebuffer, LEDs, 7-segment display, text LCD, buzzer, buttons and accelerometer"
requires-python = ">=3.10"
keywords = ["game", "arcade", "framebuffer", "embedded", "accelerometer", "linux"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console :: Framebuffer",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Arcade",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
lanedash = "lanedash.game:main"

[tool.hatch.build.targets.wheel]
packages = ["lanedash"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
