import sys
from pathlib import Path

# Allow running as `python scripts/warm_cache.py` from the project root
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))  # noqa: E402

from cookbook.crud import KeyValueStore
from cookbook.db import SessionLocal, init_db
from cookbook.site import Site
from cookbook.store import cache_key


def main():
    init_db()
    kv = KeyValueStore(SessionLocal)
    site = Site(kv=kv)
    languages = sys.argv[1:] or [l for l in site.settings.languages if l != site.source_language]
    for lang in languages:
        if not site.settings.is_supported(lang):
            print(f'Skipping unsupported language {lang}')
            continue
        existing = kv.get_json(cache_key(lang))
        if existing:
            print(f'{lang}: {len(existing)} cached translation(s), skipping')
            continue
        site.content(lang)
        saved = kv.get_json(cache_key(lang)) or {}
        print(f'{lang}: cached {len(saved)} translation(s)')


if __name__ == '__main__':
    main()
