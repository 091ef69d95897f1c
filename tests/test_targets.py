"""Tests for target descriptors, projects.json loading and editor discovery."""

import json
from pathlib import Path

import pytest

from uetail import config, discovery
from uetail.config import Config, ConfigError, load_config
from uetail.targets import (Build, Project, TargetError, log_path_from_exe,
                            log_path_from_uproject)


def test_uproject_log_path():
    p = log_path_from_uproject(Path('/games/MyGame/MyGame.uproject'))
    assert p == Path('/games/MyGame/Saved/Logs/MyGame.log')


def test_exe_log_path():
    p = log_path_from_exe(Path('/builds/Win64/MyGame.exe'))
    assert p == Path('/builds/Win64/MyGame/Saved/Logs/MyGame.log')


@pytest.mark.parametrize('bad', ['', '/'])
def test_no_stem_is_a_target_error(bad):
    with pytest.raises(TargetError):
        log_path_from_uproject(bad)
    with pytest.raises(TargetError):
        log_path_from_exe(bad)


def test_display_name_falls_back_to_key():
    assert Project('prj1', 'a.uproject').display_name == 'prj1'
    assert Project('prj1', 'a.uproject', name='  ').display_name == 'prj1'
    assert Build('b', 'a.exe', name='Shipping').display_name == 'Shipping'


# projects.json

def _write(path, data):
    path.write_text(json.dumps(data), encoding='utf-8')
    return path


def test_load_config(tmp_path):
    cfg_path = _write(tmp_path / 'projects.json', {
        'projects': [
            {'key': 'prj1', 'name': 'My Game', 'uproject': 'MyGame/MyGame.uproject'},
            {'key': 'abs', 'uproject': str(tmp_path / 'Abs' / 'Abs.uproject')},
        ],
        'builds': [{'key': 'dev', 'exe': 'Builds/MyGame.exe'}],
    })
    cfg = load_config(cfg_path)
    assert [t.key for t in cfg.targets] == ['prj1', 'abs', 'dev']
    assert cfg.projects[0].uproject == tmp_path / 'MyGame' / 'MyGame.uproject'
    assert cfg.projects[0].display_name == 'My Game'
    assert cfg.projects[1].uproject == tmp_path / 'Abs' / 'Abs.uproject'
    assert cfg.builds[0].exe == tmp_path / 'Builds' / 'MyGame.exe'
    assert len(cfg) == 3


def test_builds_are_optional(tmp_path):
    cfg = load_config(_write(tmp_path / 'p.json', {'projects': []}))
    assert cfg.targets == []


def test_explicit_missing_config_fails(tmp_path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / 'nope.json')


def test_malformed_json_fails(tmp_path):
    path = tmp_path / 'projects.json'
    path.write_text('{"projects": [', encoding='utf-8')
    with pytest.raises(ConfigError, match='Parsing'):
        load_config(path)


@pytest.mark.parametrize('data', [
    {'projects': [{'name': 'no key', 'uproject': 'a.uproject'}]},
    {'projects': [{'key': 'k'}]},
    {'projects': ['not an object']},
    {'projects': [], 'builds': [{'key': 'b'}]},
    ['not', 'an', 'object'],
])
def test_invalid_entries_fail(tmp_path, data):
    with pytest.raises(ConfigError):
        load_config(_write(tmp_path / 'projects.json', data))


def test_no_config_anywhere_is_empty(tmp_path, monkeypatch):
    monkeypatch.setattr(config, 'candidate_paths', lambda: [tmp_path / 'projects.json'])
    cfg = load_config()
    assert len(cfg) == 0
    assert cfg.source is None


def test_default_lookup_uses_cwd(tmp_path, monkeypatch):
    _write(tmp_path / 'projects.json',
           {'projects': [{'key': 'k', 'uproject': 'K/K.uproject'}]})
    monkeypatch.chdir(tmp_path)
    cfg = load_config()
    assert cfg.projects[0].key == 'k'


# discovery

def test_slugify():
    assert discovery.slugify('My Cool_Game 2') == 'my-cool-game-2'
    assert discovery.slugify('--Ünïcode--') == 'n-code'
    assert discovery.slugify('!!!') == 'project'


def test_uproject_from_cmdline():
    f = discovery.uproject_from_cmdline
    assert f(['UnrealEditor.exe', 'C:/G/Game.uproject', '-log']) == 'C:/G/Game.uproject'
    assert f(['UnrealEditor.exe', '-Project', 'D:/X/X.UPROJECT']) == 'D:/X/X.UPROJECT'
    assert f(['UnrealEditor.exe', '-project', 'notaproject']) is None
    assert f([]) is None


class _FakeProc:
    def __init__(self, name, cmdline, cwd='/work'):
        self.info = {'name': name, 'cmdline': cmdline}
        self._cwd = cwd

    def cwd(self):
        return self._cwd


def test_discover_open_editors(monkeypatch):
    procs = [
        _FakeProc('UnrealEditor.exe', ['UnrealEditor.exe', '/g/Shooter/Shooter.uproject']),
        _FakeProc('UE4Editor.exe', ['UE4Editor.exe', '-project', 'Rel/Rel.uproject']),
        _FakeProc('UnrealEditor.exe', ['UnrealEditor.exe', '-game']),
        _FakeProc('notepad.exe', ['notepad.exe', 'x.uproject']),
        _FakeProc(None, None),
    ]
    monkeypatch.setattr(discovery.psutil, 'process_iter', lambda attrs=None: iter(procs))
    found = discovery.discover_open_editors()
    assert [(p.key, p.name, p.discovered) for p in found] == [
        ('shooter', 'Shooter', True),
        ('rel', 'Rel', True),
    ]
    assert found[0].uproject == Path('/g/Shooter/Shooter.uproject')
    assert found[1].uproject == Path('/work/Rel/Rel.uproject')


def test_merge_deduplicates_by_path_then_key(tmp_path):
    existing = Project('shooter', tmp_path / 'Shooter' / 'Shooter.uproject')
    cfg = Config([existing])
    discovered = [
        Project('other-key', tmp_path / 'Shooter' / 'Shooter.uproject', discovered=True),
        Project('SHOOTER', tmp_path / 'Elsewhere' / 'Shooter.uproject', discovered=True),
        Project('racer', tmp_path / 'Racer' / 'Racer.uproject', discovered=True),
        Project('racer', tmp_path / 'Racer2' / 'Racer.uproject', discovered=True),
    ]
    assert discovery.merge_discovered(cfg, discovered) == 1
    assert [p.key for p in cfg.projects] == ['shooter', 'racer']
    assert discovery.merge_discovered(cfg, discovered) == 0
