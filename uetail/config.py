"""
projects.json loading.

    {
      "projects": [{"key": "prj1", "name": "My Game", "uproject": "C:/Games/MyGame/MyGame.uproject"}],
      "builds":   [{"key": "game-dev", "exe": "D:/Builds/MyGame.exe"}]
    }

Only "projects" is required at the top level; "name" is optional everywhere.
Relative paths are taken relative to the directory holding the file.
"""

import json
import logging
from pathlib import Path

from .targets import Build, Project

logger = logging.getLogger(__name__)

CONFIG_NAME = 'projects.json'


class ConfigError(Exception):
    pass


class Config:
    def __init__(self, projects=None, builds=None, source: Path | None = None):
        self.projects: list = list(projects or [])
        self.builds:   list = list(builds or [])
        self.source         = source

    @property
    def targets(self) -> list:
        # Selection order: projects first, then builds.
        return self.projects + self.builds

    def __len__(self) -> int:
        return len(self.projects) + len(self.builds)


def candidate_paths() -> list:
    return [
        Path.cwd() / CONFIG_NAME,
        Path(__file__).resolve().parent / CONFIG_NAME,
    ]


def _resolve(base: Path, raw: str) -> Path:
    p = Path(raw).expanduser()
    return p if p.is_absolute() else base / p


def _entry(d, required: tuple, where: str) -> dict:
    if not isinstance(d, dict):
        raise ConfigError(f'{where}: expected an object, got {type(d).__name__}')
    missing = [k for k in required if not isinstance(d.get(k), str) or not d.get(k)]
    if missing:
        raise ConfigError(f'{where}: missing {", ".join(missing)}')
    return d


def parse_config(data: dict, base: Path, source: Path | None = None) -> Config:
    if not isinstance(data, dict):
        raise ConfigError('top level must be an object')
    projects = []
    for i, d in enumerate(data.get('projects') or []):
        d = _entry(d, ('key', 'uproject'), f'projects[{i}]')
        projects.append(Project(d['key'], _resolve(base, d['uproject']),
                                name=d.get('name') or ''))
    builds = []
    for i, d in enumerate(data.get('builds') or []):
        d = _entry(d, ('key', 'exe'), f'builds[{i}]')
        builds.append(Build(d['key'], _resolve(base, d['exe']),
                            name=d.get('name') or ''))
    return Config(projects, builds, source)


def load_config(path=None) -> Config:
    """
    Load the first projects.json found.

    An explicit *path* must exist. Without one, a missing file is not an
    error: an empty Config is returned and discovery can fill it in.
    """
    if path is not None:
        path = Path(path)
        if not path.is_file():
            raise ConfigError(f'{path}: not found')
    else:
        path = next((p for p in candidate_paths() if p.is_file()), None)
        if path is None:
            logger.info('no %s found, relying on discovery', CONFIG_NAME)
            return Config()

    try:
        with open(path, encoding='utf-8') as fh:
            data = json.load(fh)
    except OSError as exc:
        raise ConfigError(f'Reading {path}: {exc}') from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f'Parsing {path}: {exc}') from exc

    try:
        cfg = parse_config(data, path.resolve().parent, source=path)
    except ConfigError as exc:
        raise ConfigError(f'{path}: {exc}') from exc
    logger.info('loaded %s: %d projects, %d builds',
                path, len(cfg.projects), len(cfg.builds))
    return cfg
