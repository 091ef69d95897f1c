"""
Auto-discovery of running Unreal editors.

Looks at the process table for editor executables and pulls the .uproject
they were started with out of the command line.
"""

import logging
from pathlib import Path

import psutil

from .targets import Project

logger = logging.getLogger(__name__)

EDITOR_PATTERNS = ('unrealeditor.exe', 'ue4editor.exe', 'ue5editor.exe')


def slugify(s: str) -> str:
    out       = []
    last_dash = False
    for ch in s.lower():
        if ch.isascii() and ch.isalnum():
            out.append(ch)
            last_dash = False
        elif not last_dash and out:
            out.append('-')
            last_dash = True
    slug = ''.join(out).rstrip('-')
    return slug or 'project'


def uproject_from_cmdline(cmdline: list) -> str | None:
    # First argument ending in .uproject, or the one following -project.
    for i, arg in enumerate(cmdline):
        if arg.lower().endswith('.uproject'):
            return arg
        if arg.lower() == '-project' and i + 1 < len(cmdline):
            nxt = cmdline[i + 1]
            if nxt.lower().endswith('.uproject'):
                return nxt
    return None


def _is_editor(name: str) -> bool:
    name = (name or '').lower()
    return any(p in name for p in EDITOR_PATTERNS)


def discover_open_editors() -> list:
    results = []
    for proc in psutil.process_iter(['name', 'cmdline']):
        try:
            if not _is_editor(proc.info['name']):
                continue
            arg = uproject_from_cmdline(proc.info['cmdline'] or [])
            if arg is None:
                continue
            path = Path(arg)
            if not path.is_absolute():
                try:
                    path = Path(proc.cwd()) / path
                except (psutil.AccessDenied, psutil.ZombieProcess):
                    pass
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue
        name = path.stem or 'Project'
        results.append(Project(slugify(name), path, name=name, discovered=True))
    logger.debug('discovered %d running editors', len(results))
    return results


def _path_key(p: Path) -> str:
    try:
        return str(p.resolve(strict=True)).lower()
    except OSError:
        return str(p).lower()


def merge_discovered(cfg, discovered: list) -> int:
    """
    Append *discovered* projects to cfg.projects, skipping any whose
    canonical path or key is already known. Returns how many were added.
    """
    paths = {_path_key(p.uproject) for p in cfg.projects}
    keys  = {p.key.lower() for p in cfg.projects}
    added = 0
    for p in discovered:
        pk = _path_key(p.uproject)
        if pk in paths or p.key.lower() in keys:
            continue
        cfg.projects.append(p)
        paths.add(pk)
        keys.add(p.key.lower())
        added += 1
    if added:
        logger.info('added %d discovered editor projects', added)
    return added


def refresh(cfg) -> int:
    return merge_discovered(cfg, discover_open_editors())
