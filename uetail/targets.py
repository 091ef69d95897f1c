"""
Selectable tail targets and the rule that maps each one to its log file.

    Project  C:/Games/MyGame/MyGame.uproject -> C:/Games/MyGame/Saved/Logs/MyGame.log
    Build    D:/Builds/MyGame.exe            -> D:/Builds/MyGame/Saved/Logs/MyGame.log
"""

from pathlib import Path


class TargetError(ValueError):
    # A descriptor whose log path cannot be derived.
    pass


def _parent_and_stem(path: Path, kind: str) -> tuple[Path, str]:
    stem = path.stem
    if not stem or not path.name:
        raise TargetError(f'Invalid {kind} filename: {str(path)!r}')
    return path.parent, stem


def log_path_from_uproject(uproject) -> Path:
    parent, stem = _parent_and_stem(Path(uproject), '.uproject')
    return parent / 'Saved' / 'Logs' / f'{stem}.log'


def log_path_from_exe(exe) -> Path:
    parent, stem = _parent_and_stem(Path(exe), '.exe')
    # packaged builds keep their Saved folder in a sibling directory named after the exe
    return parent / stem / 'Saved' / 'Logs' / f'{stem}.log'


class Project:
    kind = 'project'

    def __init__(self, key: str, uproject, name: str = '', discovered: bool = False):
        self.key        = key
        self.name       = name
        self.uproject   = Path(uproject)
        self.discovered = discovered

    @property
    def path(self) -> Path:
        return self.uproject

    @property
    def display_name(self) -> str:
        return self.name if self.name.strip() else self.key

    def log_path(self) -> Path:
        return log_path_from_uproject(self.uproject)

    def __repr__(self):
        return f'Project({self.key!r}, {str(self.uproject)!r})'


class Build:
    kind = 'build'

    def __init__(self, key: str, exe, name: str = ''):
        self.key  = key
        self.name = name
        self.exe  = Path(exe)

    @property
    def path(self) -> Path:
        return self.exe

    @property
    def display_name(self) -> str:
        return self.name if self.name.strip() else self.key

    def log_path(self) -> Path:
        return log_path_from_exe(self.exe)

    def __repr__(self):
        return f'Build({self.key!r}, {str(self.exe)!r})'
