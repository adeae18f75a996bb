[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "meteostation"
version = "0.1.0"
description = "Weather station logic: BMP280 and AHT20 sensor decoding, SSD1306 display drawing, LED alert patterns and a small asyncio HTTP dashboard."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "weather",
    "weather-station",
    "bmp280",
    "aht20",
    "ssd1306",
    "ws2812",
    "sensors",
    "dashboard",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: AsyncIO",
    "Topic :: Scientific/Engineering :: Atmospheric Science",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["meteostation"]

[tool.hatch.build.targets.sdist]
include = ["meteostation", "tests"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
