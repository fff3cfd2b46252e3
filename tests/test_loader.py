"""Tests for flow file discovery and loading."""

import sys
from pathlib import Path
from textwrap import dedent
from typing import TYPE_CHECKING

import pytest

from krepko.core.loader import FlowLoader, discover, split_pattern
from krepko.core.registry import FlowRegistry, active_registry
from krepko.errors import FlowLoadError, FlowWarning

if TYPE_CHECKING:
    from pyfakefs.fake_filesystem import FakeFilesystem

USERS_FLOWS = dedent('''
    from krepko import expect, krepko

    api = krepko()

    api.flow('List users').tags(['users']).do('List', lambda ctx: None)
    api.flow('Create user').do('Create', lambda ctx: None)
''')

BROKEN_FLOWS = dedent('''
    from krepko import krepko

    krepko().flow('Half declared')

    raise RuntimeError('broken flow file')
''')


def write(path: Path, content: str) -> Path:
    """Write a flow file, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding='utf-8')
    return path


def test_discover(fs: 'FakeFilesystem') -> None:
    """Flow files are found recursively, sorted, skipping tool directories."""
    for name in (
        '/project/users.krepko.py',
        '/project/api/auth.krepko.py',
        '/project/api/helpers.py',
        '/project/.venv/lib/site.krepko.py',
        '/project/node_modules/pkg/flow.krepko.py',
        '/project/build/copy.krepko.py',
    ):
        fs.create_file(name)

    fs.create_dir('/project/dir.krepko.py')

    assert discover('**/*.krepko.py', '/project') == [
        Path('/project/api/auth.krepko.py'),
        Path('/project/users.krepko.py'),
    ]


def test_discover_current_directory(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """The current directory is searched by default."""
    path = write(tmp_path / 'flows' / 'health.krepko.py', '')
    monkeypatch.chdir(tmp_path)

    assert discover('flows/*.krepko.py') == [path.resolve()]


def test_discover_nothing(fs: 'FakeFilesystem') -> None:
    """No matches yield an empty list."""
    fs.create_dir('/empty')

    assert discover('**/*.krepko.py', '/empty') == []


def test_load_file(tmp_path: Path) -> None:
    """Flows declared by a file are registered and returned."""
    path = write(tmp_path / 'users.krepko.py', USERS_FLOWS)
    registry = FlowRegistry('http://api.test')

    flows = FlowLoader().load_file(path, registry)

    assert [flow.name for flow in flows] == ['List users', 'Create user']
    assert list(registry) == flows
    assert flows[0].flow_tags == ('users',)
    assert flows[0].base_url == 'http://api.test'
    assert active_registry() is None


def test_load_returns_flows_without_shared_state(tmp_path: Path) -> None:
    """Each load builds its own registry."""
    path = write(tmp_path / 'users.krepko.py', USERS_FLOWS)
    loader = FlowLoader(base_url='http://api.test')

    first = loader.load([path])
    second = loader.load([str(path)])

    assert len(first) == len(second) == 2
    assert first[0] is not second[0]


def test_load_strict(tmp_path: Path) -> None:
    """Broken files abort strict loading."""
    good = write(tmp_path / 'a.krepko.py', USERS_FLOWS)
    broken = write(tmp_path / 'b.krepko.py', BROKEN_FLOWS)

    with pytest.raises(FlowLoadError) as error:
        FlowLoader(base_url='http://api.test').load([good, broken])

    assert error.value.path == broken
    assert 'broken flow file' in error.value.message
    assert isinstance(error.value.__cause__, RuntimeError)


def test_load_relaxed(tmp_path: Path) -> None:
    """Broken files are skipped with a warning in relaxed mode."""
    good = write(tmp_path / 'a.krepko.py', USERS_FLOWS)
    broken = write(tmp_path / 'b.krepko.py', BROKEN_FLOWS)

    with pytest.warns(FlowWarning, match='broken flow file'):
        flows = FlowLoader(strict=False, base_url='http://api.test').load([good, broken])

    assert [flow.name for flow in flows] == ['List users', 'Create user']


def test_load_syntax_error(tmp_path: Path) -> None:
    """Syntax errors are load errors."""
    path = write(tmp_path / 'syntax.krepko.py', 'def broken(:\n')

    with pytest.raises(FlowLoadError, match='SyntaxError'):
        FlowLoader().load([path])


def test_load_missing_base_url(tmp_path: Path) -> None:
    """Declarations without any base URL fail to load."""
    path = write(tmp_path / 'users.krepko.py', USERS_FLOWS)

    with pytest.raises(FlowLoadError, match='Base URL is required'):
        FlowLoader().load([path])


def test_module_names_are_unique() -> None:
    """Files with the same name load as distinct modules."""
    first = FlowLoader.make_module_name(Path('a/users.krepko.py'))
    second = FlowLoader.make_module_name(Path('b/users.krepko.py'))

    assert first != second
    assert first.isidentifier()


@pytest.mark.parametrize('pattern, anchor, relative', (
    pytest.param('**/*.krepko.py', None, '**/*.krepko.py', id='relative'),
    pytest.param('/srv/flows/**/*.krepko.py', Path('/srv/flows'), '**/*.krepko.py', id='recursive'),
    pytest.param('/srv/*/users.krepko.py', Path('/srv'), '*/users.krepko.py', id='inner glob'),
    pytest.param('/srv/flows/users.krepko.py', Path('/srv/flows'), 'users.krepko.py', id='plain file'),
))
def test_split_pattern(pattern: str, anchor: Path | None, relative: str) -> None:
    """Absolute patterns are split at the first glob segment."""
    assert split_pattern(pattern) == (anchor, relative)


def test_discover_absolute_pattern(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Absolute patterns ignore the root and the current directory."""
    path = write(tmp_path / 'flows' / 'api' / 'health.krepko.py', '')
    write(tmp_path / 'other.krepko.py', '')

    monkeypatch.chdir(tmp_path / 'flows')

    pattern = f'{tmp_path.resolve() / "flows"}/**/*.krepko.py'

    assert discover(pattern, '/nowhere') == [path.resolve()]


def test_load_sibling_module(tmp_path: Path) -> None:
    """Flow files import helper modules placed next to them."""
    write(tmp_path / 'flows' / 'krepko_auth_steps.py', dedent('''
        def login(ctx):
            ctx.set('token', 'secret')
    '''))
    path = write(tmp_path / 'flows' / 'auth.krepko.py', dedent('''
        from krepko import krepko
        from krepko_auth_steps import login

        krepko().flow('Login').do('Login', login)
    '''))

    try:
        flows = FlowLoader(base_url='http://api.test').load([path])
    finally:
        sys.modules.pop('krepko_auth_steps', None)

    assert [flow.name for flow in flows] == ['Login']
    assert f'{path.resolve().parent}' not in sys.path
