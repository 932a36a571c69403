[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "agentsdk"
version = "0.1.0"
description = "Building blocks for streaming LLM agents: typed messages and deltas, tools, compaction, retry and fallback providers, and an Ollama client."
requires-python = ">=3.10"
dependencies = [
    "httpx",
]
keywords = ["llm", "agent", "streaming", "tools", "ollama", "retry", "fallback"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Application Frameworks",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["agentsdk"]

[tool.hatch.build.targets.sdist]
include = ["agentsdk", "tests", "README.md"]

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
