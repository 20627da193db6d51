"""Which files make it into the project tree, and which are build manifests."""

from __future__ import annotations

_VCS_AND_EDITOR_DIRS = {".git", ".hg", ".svn", ".idea", ".vscode"}
_DEPENDENCY_DIRS = {
    "node_modules", "bower_components", "vendor", "Pods",
    "venv", ".venv", "env", ".eggs",
}
_BUILD_DIRS = {
    "dist", "build", "out", "bin", "obj", "release", "releases", "target",
    ".next", ".nuxt", ".output", ".gradle", ".terraform",
}
_CACHE_DIRS = {
    ".cache", "__pycache__", ".tox", ".nox", ".mypy_cache", ".pytest_cache",
    ".ruff_cache", "coverage", "htmlcov",
}

SKIP_DIRS: frozenset[str] = frozenset(
    _VCS_AND_EDITOR_DIRS | _DEPENDENCY_DIRS | _BUILD_DIRS | _CACHE_DIRS
)

SKIP_EXTENSIONS: tuple[str, ...] = (
    # compiled
    ".pyc", ".pyo", ".so", ".o", ".a", ".dylib", ".dll", ".exe", ".bin", ".class", ".jar",
    # media and fonts
    ".png", ".jpg", ".jpeg", ".gif", ".bmp", ".ico", ".webp",
    ".mp3", ".mp4", ".avi", ".mov", ".wav",
    ".woff", ".woff2", ".ttf", ".eot", ".otf",
    # archives and documents
    ".zip", ".tar", ".gz", ".bz2", ".rar", ".7z", ".pdf", ".doc", ".docx", ".xls", ".xlsx",
    # generated web assets
    ".min.js", ".min.css", ".map",
)

LOCK_FILES: frozenset[str] = frozenset(
    {
        "yarn.lock", "package-lock.json", "pnpm-lock.yaml", "Pipfile.lock",
        "poetry.lock", "composer.lock", "Gemfile.lock", "Cargo.lock",
    }
)

OS_JUNK: frozenset[str] = frozenset({".DS_Store", "Thumbs.db"})

# Never listed, so never read or sent anywhere.
SECRET_FILES: frozenset[str] = frozenset(
    {
        ".env", ".env.local", ".env.production", ".env.development",
        "id_rsa", "id_dsa", "id_ecdsa", "id_ed25519", ".npmrc", ".pypirc", ".netrc",
    }
)
SECRET_EXTENSIONS: tuple[str, ...] = (".pem", ".key", ".p12", ".pfx", ".keystore")

CONFIG_NAMES: frozenset[str] = frozenset(
    {
        "package.json", "tsconfig.json",
        "requirements.txt", "pyproject.toml", "setup.cfg", "setup.py",
        "Cargo.toml", "go.mod", "Gemfile", "pom.xml", "build.gradle",
        "Dockerfile", "docker-compose.yml", "docker-compose.yaml",
    }
)
CONFIG_SUFFIXES: tuple[str, ...] = (".csproj",)


def _filename(path: str) -> str:
    return path.rsplit("/", maxsplit=1)[-1]


def is_skipped_dir(name: str) -> bool:
    """Return *True* if a directory with this name is never descended into."""
    return name in SKIP_DIRS or name.endswith(".egg-info")


def is_secret_file(path: str) -> bool:
    lower = _filename(path).lower()
    return lower in SECRET_FILES or lower.endswith(SECRET_EXTENSIONS)


def should_skip(path: str) -> bool:
    """Return *True* if the relative POSIX *path* is left out of the tree."""
    name = _filename(path)
    if is_secret_file(path) or name in LOCK_FILES or name in OS_JUNK:
        return True
    if any(is_skipped_dir(part) for part in path.split("/")[:-1]):
        return True
    return name.lower().endswith(SKIP_EXTENSIONS)


def is_config_file(path: str) -> bool:
    """Return *True* for the build/dependency manifests used to classify a project."""
    name = _filename(path)
    return name in CONFIG_NAMES or name.endswith(CONFIG_SUFFIXES)
