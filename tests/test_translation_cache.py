from docs_translator.core.cache import TranslationCache


def test_key_depends_on_content_and_language():
    key = TranslationCache.make_key("Hello [#i1#]", "es")

    assert key == TranslationCache.make_key("Hello [#i1#]", "ES")
    assert key != TranslationCache.make_key("Hello [#i1#]", "fr")
    assert key != TranslationCache.make_key("Hello [#i2#]", "es")


def test_key_parts_are_separated():
    assert TranslationCache.make_key("ab", "c") != TranslationCache.make_key("a", "bc")


def test_get_and_set_track_hits_and_misses():
    cache = TranslationCache()
    key = cache.make_key("Hello", "es")

    assert cache.get(key) is None
    cache.set(key, "Hola")

    assert cache.get(key) == "Hola"
    assert key in cache
    assert len(cache) == 1
    assert cache.stats() == {"hits": 1, "misses": 1, "size": 1}


def test_set_is_idempotent():
    cache = TranslationCache()
    key = cache.make_key("Hello", "es")

    cache.set(key, "Hola")
    cache.set(key, "Hola")

    assert len(cache) == 1
    assert cache.get(key) == "Hola"


def test_clear_resets_entries_and_counters():
    cache = TranslationCache()
    key = cache.make_key("Hello", "es")
    cache.set(key, "Hola")
    cache.get(key)

    cache.clear()

    assert len(cache) == 0
    assert cache.stats() == {"hits": 0, "misses": 0, "size": 0}
