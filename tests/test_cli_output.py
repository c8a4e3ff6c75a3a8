import json

import pytest

import text_manager
from textkit import textkit_catalog


@pytest.fixture
def i18n(tmp_path, monkeypatch):
    # keep the system locale out of bundle fallback
    monkeypatch.setattr(textkit_catalog, 'detect_system_locale', lambda: '')
    (tmp_path / 'cli.json').write_text(json.dumps({
        'fix_errors': 'Fix {{count}} errors',
        'fix_errors_tooltip': 'There are {{count}} errors',
        'undo': '{{icon:undo}} Undo',
    }), encoding='utf-8')
    (tmp_path / 'cli_de.json').write_text(json.dumps({'fix_errors': 'Behebe {{count}} Fehler'}), encoding='utf-8')
    return tmp_path


def _run(capsys, *argv):
    assert text_manager.main(list(argv)) == 0
    return capsys.readouterr().out


def test_plain_output_with_tooltip(i18n, capsys):
    out = _run(capsys, '--i18n-dir', str(i18n), '--base', 'cli', '--lang', 'en', 'fix_errors', '3')
    assert out.splitlines() == ['Fix 3 errors', 'tooltip: There are 3 errors']


def test_localized_output(i18n, capsys):
    out = _run(capsys, '--i18n-dir', str(i18n), '--base', 'cli', '--lang', 'de', 'fix_errors', '3')
    assert out.splitlines()[0] == 'Behebe 3 Fehler'


def test_json_output_reports_spans(i18n, capsys):
    out = _run(capsys, '--i18n-dir', str(i18n), '--base', 'cli', '--lang', 'en', '--assume-font', '--json', 'undo')
    data = json.loads(out)
    assert data['text'] == chr(0xF054C) + ' Undo'
    assert data['tooltip'] is None
    assert data['spans'] == [{
        'start': 0, 'length': 1, 'icon': 'undo', 'code_point': 'U+F054C',
        'scale': 1.5, 'family': 'Material Design Icons',
    }]


def test_unknown_key_echoed(i18n, capsys):
    out = _run(capsys, '--i18n-dir', str(i18n), '--base', 'cli', '--lang', 'en', 'nope')
    assert out.splitlines() == ['nope']


def test_list_icons(capsys):
    out = _run(capsys, '--list-icons')
    assert 'undo\tU+F054C' in out.splitlines()


def test_list_langs(i18n, capsys):
    out = _run(capsys, '--i18n-dir', str(i18n), '--base', 'cli', '--list-langs')
    assert out.splitlines() == ['de']


def test_key_required(capsys):
    with pytest.raises(SystemExit):
        text_manager.main([])
