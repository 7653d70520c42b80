[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "codeagent"
version = "0.1.0"
description = "A terminal chat agent that streams model replies and works on local files through tools"
requires-python = ">=3.10"
keywords = ["agent", "llm", "chat", "terminal", "tools", "streaming"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Environment :: Console :: Curses",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development",
]
dependencies = [
    "httpx",
    "prompt-toolkit",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
codeagent = "codeagent.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["codeagent"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
