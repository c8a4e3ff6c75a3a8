import json

import pytest

from textkit import textkit_catalog
from textkit.textkit_catalog import (
    MessageCatalog, available_locales, clear_i18n_cache, detect_system_locale,
    locale_candidates, normalize_locale,
)


def _write(d, name, data):
    p = d / name
    p.write_text(json.dumps(data, ensure_ascii=False) if not isinstance(data, str) else data, encoding='utf-8')
    return p


@pytest.fixture
def bundles_dir(tmp_path):
    _write(tmp_path, 'app.json', {'$meta': {'lang': 'en'}, 'greet': 'Hello', 'bye': 'Bye', 'count': 7})
    _write(tmp_path, 'app_de.json', {'greet': 'Hallo'})
    _write(tmp_path, 'app_de_AT.json', {'bye': 'Servus'})
    return tmp_path


def _load(d, loc, **kw):
    kw.setdefault('fallback_locale', '')
    return MessageCatalog.load('app', loc, dirs=[d], **kw)


def test_region_bundle_layers_over_language_and_default(bundles_dir):
    cat = _load(bundles_dir, 'de_AT')
    assert cat.lookup('greet') == 'Hallo'
    assert cat.lookup('bye') == 'Servus'
    assert cat.resolved_locale == 'de_AT'
    assert cat.locale == 'de_AT'


def test_locale_tags_are_normalized(bundles_dir):
    cat = _load(bundles_dir, 'de-at')
    assert cat.lookup('bye') == 'Servus'


def test_language_only_bundle(bundles_dir):
    cat = _load(bundles_dir, 'de_CH')
    assert cat.lookup('greet') == 'Hallo'
    assert cat.lookup('bye') == 'Bye'
    assert cat.resolved_locale == 'de'


def test_unknown_locale_uses_fallback_then_default(bundles_dir):
    assert _load(bundles_dir, 'fr').lookup('greet') == 'Hello'
    assert _load(bundles_dir, 'fr', fallback_locale='de').lookup('greet') == 'Hallo'


def test_unknown_key_returns_key(bundles_dir):
    cat = _load(bundles_dir, 'de')
    assert cat.lookup('no.such.key') == 'no.such.key'
    assert not cat.contains('no.such.key')


def test_meta_block_is_not_a_message_and_values_are_strings(bundles_dir):
    cat = _load(bundles_dir, None)
    assert not cat.contains('$meta')
    assert cat.lookup('count') == '7'


def test_reload_builds_new_catalog(bundles_dir):
    en = _load(bundles_dir, 'en')
    de = en.reload('de')
    assert de is not en
    assert de.lookup('greet') == 'Hallo'
    # the old instance is untouched
    assert en.lookup('greet') == 'Hello'
    assert de.base_name == en.base_name == 'app'


def test_catalog_is_read_only(bundles_dir):
    cat = _load(bundles_dir, 'de')
    with pytest.raises(TypeError):
        cat._messages['greet'] = 'x'  # type: ignore[index]


def test_invalid_bundle_skipped_and_logged(bundles_dir):
    _write(bundles_dir, 'app_fr.json', '{not json')
    logs = []
    cat = _load(bundles_dir, 'fr', sink=logs.append)
    assert cat.lookup('greet') == 'Hello'
    assert any('app_fr.json' in line for line in logs)


def test_missing_base_logs_warning(tmp_path):
    logs = []
    cat = MessageCatalog.load('ghost', 'de', dirs=[tmp_path], fallback_locale='', sink=logs.append)
    assert len(cat) == 0
    assert cat.lookup('anything') == 'anything'
    assert any(line.startswith('WARN') and 'ghost' in line for line in logs)


def test_env_directories_are_searched(bundles_dir, monkeypatch):
    monkeypatch.setenv('TEXTKIT_I18N_DIRS', str(bundles_dir))
    clear_i18n_cache()
    try:
        cat = MessageCatalog.load('app', 'de', fallback_locale='')
        assert cat.lookup('greet') == 'Hallo'
    finally:
        clear_i18n_cache()


def test_explicit_dirs_take_precedence(bundles_dir, tmp_path_factory):
    first = tmp_path_factory.mktemp('override')
    _write(first, 'app_de.json', {'greet': 'Moin'})
    cat = MessageCatalog.load('app', 'de', dirs=[first, bundles_dir], fallback_locale='')
    assert cat.lookup('greet') == 'Moin'
    # default bundle still comes from the second directory
    assert cat.lookup('bye') == 'Bye'


def test_in_memory_bundles_and_reload():
    cat = MessageCatalog.from_bundles('mem', 'de', {'': {'a': 'A'}, 'de': {'a': 'Ä'}}, fallback_locale='')
    assert cat.lookup('a') == 'Ä'
    assert cat.reload('en').lookup('a') == 'A'


def test_available_locales(bundles_dir):
    _write(bundles_dir, 'app_window.json', {})  # different base, not a locale
    assert available_locales('app', [bundles_dir]) == ['de', 'de_AT']


@pytest.mark.parametrize('raw,expected', [
    ('de', 'de'),
    ('de-de', 'de_DE'),
    ('en_US.UTF-8', 'en_US'),
    ('sr_RS@latin', 'sr_RS'),
    ('zh-Hant-TW', 'zh_TW'),
    ('es-419', 'es_419'),
    ('German_Germany', 'de_DE'),
    ('C', ''),
    ('POSIX', ''),
    ('', ''),
    (None, ''),
])
def test_normalize_locale(raw, expected):
    assert normalize_locale(raw) == expected


def test_locale_candidates():
    assert locale_candidates('de-AT') == ['de_AT', 'de']
    assert locale_candidates('de') == ['de']
    assert locale_candidates(None) == []


def test_detect_system_locale_from_environment(monkeypatch):
    monkeypatch.setattr(textkit_catalog._locale, 'getlocale', lambda: (None, None))
    for key in ('LC_ALL', 'LC_MESSAGES', 'LANGUAGE'):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv('LANG', 'de_DE.UTF-8')
    assert detect_system_locale() == 'de_DE'
    monkeypatch.setenv('LANGUAGE', 'pt_BR:en')
    assert detect_system_locale() == 'pt_BR'


def test_shipped_toolbar_bundles_load():
    # bundles under the repository i18n/ directory are found without configuration
    clear_i18n_cache()
    cat = MessageCatalog.load('toolbar', 'de', fallback_locale='')
    assert cat.lookup('errors_found') == 'Behebe {{count}} Fehler'
    # German bundle omits icon-only labels; they come from the default bundle
    assert cat.lookup('undo') == '{{icon:undo}}'
    assert 'de' in available_locales('toolbar')


def test_shipped_translations_have_default_entries():
    clear_i18n_cache()
    default = MessageCatalog.load('toolbar', 'xx', fallback_locale='')
    for code in available_locales('toolbar'):
        cat = MessageCatalog.load('toolbar', code, fallback_locale='')
        missing = [k for k in cat.keys() if not default.contains(k)]
        assert not missing, f"Keys in toolbar_{code}.json without a default entry: {missing}"


def test_detect_system_locale_skips_c_locale(monkeypatch):
    monkeypatch.setattr(textkit_catalog._locale, 'getlocale', lambda: (None, None))
    monkeypatch.delenv('LC_MESSAGES', raising=False)
    monkeypatch.setenv('LC_ALL', 'C')
    monkeypatch.setenv('LANGUAGE', 'POSIX:fr_FR')
    monkeypatch.setenv('LANG', 'de_DE.UTF-8')
    assert detect_system_locale() == 'fr_FR'
    monkeypatch.delenv('LANGUAGE')
    assert detect_system_locale() == 'de_DE'
    monkeypatch.setenv('LANG', 'C.UTF-8')
    assert detect_system_locale() == ''
