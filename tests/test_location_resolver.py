"""Tests for the LocationResolverService orchestrator."""

import pytest

from location_resolver.config import ResolverConfig
from location_resolver.domain.errors import GeocodingError, SourceNotConfiguredError
from location_resolver.domain.models import Country, NewCity, SearchResult, State
from location_resolver.services import LocationResolverService, SearchStage, next_search_stage


def db_result(*locations):
    return SearchResult(locations=tuple(locations), total=len(locations), has_more=False)


class TestShortQueryGuard:
    """Queries shorter than two characters never reach a source."""

    @pytest.mark.parametrize("query", ["", "a", " m ", "   "])
    def test_short_query_returns_empty(self, resolver, database, geocoder, cache, query):
        result = resolver.search(query, "India")

        assert result == SearchResult.empty()
        assert result.as_dict() == {"locations": [], "total": 0, "hasMore": False}
        database.search_cities.assert_not_called()
        geocoder.search.assert_not_called()
        assert cache.size() == 0

    def test_single_letter_with_default_country(self, resolver, database):
        result = resolver.search("a")

        assert result.is_empty
        database.search_cities.assert_not_called()


class TestSearchFallbackChain:
    def test_database_sufficient_skips_external_and_static(
        self, resolver, database, geocoder, make_location
    ):
        database.search_cities.return_value = db_result(
            make_location("1", "Mumbai", is_popular=True),
            make_location("2", "Mumbra"),
            make_location("3", "Mumbai Suburban"),
        )

        result = resolver.search("mum", "India", 10)

        assert [loc.id for loc in result.locations] == ["1", "3", "2"]
        geocoder.search.assert_not_called()

    def test_external_consulted_below_threshold(
        self, resolver, database, geocoder, make_location
    ):
        database.search_cities.return_value = db_result(
            make_location("1", "Mumbai", is_popular=True),
        )
        geocoder.search.return_value = [
            make_location("1277333", "Mumbra", population=674000),
        ]

        result = resolver.search("mum", "India", 10)

        geocoder.search.assert_called_once_with("mum", "India", 10, include_coordinates=True)
        assert [loc.name for loc in result.locations] == ["Mumbai", "Mumbra"]
        assert result.total == 2

    def test_static_not_consulted_when_candidates_exist(
        self, resolver, database, make_location
    ):
        database.search_cities.return_value = db_result(
            make_location("db-1", "Mumford"),
        )

        result = resolver.search("mum", "India")

        assert [loc.id for loc in result.locations] == ["db-1"]

    def test_all_sources_failing_falls_back_to_gazetteer(
        self, resolver, database, geocoder
    ):
        database.search_cities.side_effect = RuntimeError("connection refused")
        geocoder.search.side_effect = GeocodingError(
            "GeoNames request failed with status 503",
            source="geonames",
            query="mum",
            status_code=503,
        )

        result = resolver.search("Mum", "India", 5)

        assert [loc.name for loc in result.locations] == ["Mumbai"]
        assert result.total == 1
        assert result.has_more is False

    def test_unconfigured_external_source_is_skipped(self, resolver, geocoder):
        geocoder.search.side_effect = SourceNotConfiguredError(
            "GeoNames API key not configured",
            source="geonames",
            setting_name="LRE_GEONAMES_API_KEY",
        )

        result = resolver.search("Mum", "India", 5)

        data = result.as_dict()
        assert data["locations"][0]["name"] == "Mumbai"
        assert data["locations"][0]["isPopular"] is True
        assert data["total"] == 1
        assert data["hasMore"] is False

    def test_static_fallback_disabled(self, database, geocoder, gazetteer, cache):
        resolver = LocationResolverService(
            database=database,
            geocoder=geocoder,
            gazetteer=gazetteer,
            cache=cache,
            config=ResolverConfig(fallback_to_static=False),
        )

        result = resolver.search("Mum", "India")

        assert result.is_empty

    def test_duplicate_ids_keep_database_version(
        self, resolver, database, geocoder, make_location
    ):
        database.search_cities.return_value = db_result(
            make_location("1275339", "Mumbai", is_popular=True),
        )
        geocoder.search.return_value = [
            make_location("1275339", "Bombay", population=12691836),
            make_location("1262180", "Mumra", population=100000),
        ]

        result = resolver.search("mum", "India")

        ids = [loc.id for loc in result.locations]
        assert ids.count("1275339") == 1
        merged = next(loc for loc in result.locations if loc.id == "1275339")
        assert merged.name == "Mumbai"
        assert merged.is_popular is True

    def test_truncation_reports_total_and_has_more(
        self, resolver, database, make_location
    ):
        database.search_cities.return_value = db_result(
            *[make_location(str(i), f"Sanpur {i}", population=1000 - i) for i in range(5)]
        )

        result = resolver.search("san", "India", 3)

        assert len(result.locations) == 3
        assert result.total == 5
        assert result.has_more is True

    def test_database_has_more_hint_is_ignored(self, resolver, database, make_location):
        database.search_cities.return_value = SearchResult(
            locations=(make_location("1", "Sanpur"), make_location("2", "Sangli")),
            total=2,
            has_more=True,
        )

        result = resolver.search("san", "India", 2)

        assert result.total == 2
        assert result.has_more is False

    def test_default_country_and_limit(self, resolver, database):
        resolver.search("pune")

        database.search_cities.assert_called_once_with("pune", "India", 10)

    @pytest.mark.parametrize("requested,expected", [(500, 50), (0, 1), (-3, 1), (7, 7)])
    def test_limit_is_clamped(self, resolver, database, requested, expected):
        resolver.search("pune", "India", requested)

        database.search_cities.assert_called_once_with("pune", "India", expected)

    def test_coordinates_stripped_on_request(self, resolver, database, make_location):
        database.search_cities.return_value = db_result(
            make_location("1", "Mumbai", lat=19.07, lng=72.87),
        )

        with_coords = resolver.search("mum", "India")
        without_coords = resolver.search("mum", "India", include_coordinates=False)

        assert with_coords.locations[0].coordinates is not None
        assert without_coords.locations[0].coordinates is None
        assert "coordinates" not in without_coords.locations[0].as_dict()
        assert database.search_cities.call_count == 1


class TestSearchCache:
    def test_repeated_search_hits_cache(self, resolver, database, geocoder, make_location):
        database.search_cities.return_value = db_result(
            make_location("1", "Mumbai", is_popular=True),
        )

        first = resolver.search("mum", "India", 10)
        second = resolver.search("mum", "India", 10)

        assert first == second
        assert database.search_cities.call_count == 1
        assert geocoder.search.call_count == 1

    def test_query_case_and_whitespace_share_cache_entry(self, resolver, database):
        resolver.search("Mum", "India")
        resolver.search("  mum ", "India")

        assert database.search_cities.call_count == 1

    def test_expired_entry_queries_sources_again(self, resolver, database, clock):
        resolver.search("mum", "India", 10)
        clock.advance(299)
        resolver.search("mum", "India", 10)
        assert database.search_cities.call_count == 1

        clock.advance(2)
        resolver.search("mum", "India", 10)

        assert database.search_cities.call_count == 2

    def test_empty_result_is_cached(self, resolver, database, geocoder):
        first = resolver.search("zzq", "India")
        second = resolver.search("zzq", "India")

        assert first.is_empty and second.is_empty
        assert database.search_cities.call_count == 1
        assert geocoder.search.call_count == 1

    def test_different_limits_use_different_entries(self, resolver, database):
        resolver.search("mum", "India", 5)
        resolver.search("mum", "India", 10)

        assert database.search_cities.call_count == 2

    def test_cache_stats(self, resolver):
        resolver.search("mum", "India", 10)
        resolver.search("mum", "India", 10)

        stats = resolver.get_cache_stats()

        assert stats.size == 1
        assert stats.keys == ("mum-India-10",)
        assert stats.hits == 1
        assert stats.misses == 1
        assert stats.as_dict()["hitRate"] == 50.0

    def test_clear_cache_returns_count(self, resolver):
        resolver.search("mum", "India")
        resolver.search("del", "India")

        assert resolver.clear_cache() == 2
        assert resolver.get_cache_stats().size == 0


class TestNextSearchStage:
    def test_database_below_threshold_goes_external(self):
        assert next_search_stage(SearchStage.DATABASE, 2, 3, True) is SearchStage.EXTERNAL

    def test_database_sufficient_is_done(self):
        assert next_search_stage(SearchStage.DATABASE, 3, 3, True) is SearchStage.DONE

    def test_external_empty_goes_static(self):
        assert next_search_stage(SearchStage.EXTERNAL, 0, 3, True) is SearchStage.STATIC

    def test_external_empty_without_fallback_is_done(self):
        assert next_search_stage(SearchStage.EXTERNAL, 0, 3, False) is SearchStage.DONE

    def test_external_with_candidates_is_done(self):
        assert next_search_stage(SearchStage.EXTERNAL, 1, 3, True) is SearchStage.DONE

    def test_static_is_done(self):
        assert next_search_stage(SearchStage.STATIC, 0, 3, True) is SearchStage.DONE


class TestPopularCities:
    def test_database_unavailable_uses_gazetteer(self, resolver, database):
        database.get_popular_cities.side_effect = RuntimeError("timeout")

        cities = resolver.get_popular_cities("India", 3)

        assert len(cities) == 3
        assert all(c.country == "India" and c.is_popular for c in cities)
        assert [c.name for c in cities] == ["Mumbai", "Delhi", "Bangalore"]

    def test_database_answer_preferred(self, resolver, database, make_location):
        database.get_popular_cities.return_value = [
            make_location("p1", "Jaipur", is_popular=True, population=3046163),
        ]

        cities = resolver.get_popular_cities("India", 3)

        assert [c.id for c in cities] == ["p1"]
        database.get_popular_cities.assert_called_once_with("India", 3)

    def test_result_is_cached(self, resolver, database):
        resolver.get_popular_cities("India", 3)
        resolver.get_popular_cities("India", 3)

        assert database.get_popular_cities.call_count == 1
        assert "popular:India-3" in resolver.get_cache_stats().keys

    def test_popular_entry_separate_from_search_for_popular(self, resolver, database):
        resolver.get_popular_cities("India", 3)
        resolver.search("popular", "India", 3)

        assert database.search_cities.call_count == 1
        assert len(resolver.get_cache_stats().keys) == 2

    def test_defaults(self, resolver, database):
        resolver.get_popular_cities()

        database.get_popular_cities.assert_called_once_with("India", 20)


class TestLookups:
    def test_location_by_id_from_database(self, resolver, database, make_location):
        database.get_city_by_id.return_value = make_location("abc", "Nashik")

        location = resolver.get_location_by_id("abc")

        assert location is not None and location.name == "Nashik"

    def test_location_by_id_falls_back_to_gazetteer(self, resolver, database):
        database.get_city_by_id.side_effect = RuntimeError("db down")

        location = resolver.get_location_by_id("goa")

        assert location is not None
        assert location.name == "Goa"

    def test_unknown_id_returns_none(self, resolver):
        assert resolver.get_location_by_id("atlantis") is None

    def test_blank_id_returns_none(self, resolver, database):
        assert resolver.get_location_by_id("  ") is None
        database.get_city_by_id.assert_not_called()

    def test_states_from_database(self, resolver, database):
        database.get_states.return_value = [
            State(id="s1", name="Goa", code="GA", country_code="IN"),
        ]

        states = resolver.get_states("IN")

        assert [s.name for s in states] == ["Goa"]

    def test_states_empty_on_failure(self, resolver, database):
        database.get_states.side_effect = RuntimeError("db down")

        assert resolver.get_states("IN") == []


class TestCountries:
    def test_countries_from_database(self, resolver, database, country_directory):
        database.get_countries.return_value = [Country(code="IN", name="India")]

        countries = resolver.get_countries()

        assert countries == [Country(code="IN", name="India")]
        country_directory.list_countries.assert_not_called()

    def test_countries_from_reference_api(self, resolver, database, country_directory):
        database.get_countries.side_effect = RuntimeError("db down")
        country_directory.list_countries.return_value = [
            Country(code="FR", name="France"),
            Country(code="IN", name="India"),
        ]

        countries = resolver.get_countries()

        assert [c.code for c in countries] == ["FR", "IN"]

    def test_countries_hardcoded_fallback(self, resolver, country_directory):
        country_directory.list_countries.side_effect = RuntimeError("offline")

        countries = resolver.get_countries()

        codes = [c.code for c in countries]
        assert codes[:5] == ["IN", "US", "GB", "AU", "CA"]
        assert any(c.name == "India" for c in countries)

    def test_fallback_includes_unlisted_default_country(
        self, database, geocoder, gazetteer, cache
    ):
        resolver = LocationResolverService(
            database=database,
            geocoder=geocoder,
            gazetteer=gazetteer,
            cache=cache,
            config=ResolverConfig(default_country="Nepal"),
        )

        countries = resolver.get_countries()

        assert countries[0].name == "Nepal"
        assert countries[0].code == "NP"

    def test_countries_cached(self, resolver, database):
        resolver.get_countries()
        resolver.get_countries()

        assert database.get_countries.call_count == 1


class TestAdminMutations:
    def test_add_city_clears_whole_cache(self, resolver, database, make_location):
        resolver.search("mum", "India")
        resolver.get_popular_cities("India")
        database.add_city.return_value = make_location("new-id", "Newtown")

        added = resolver.add_city(NewCity(name="Newtown", country="India"))

        assert added is not None and added.id == "new-id"
        assert resolver.get_cache_stats().size == 0

    def test_add_city_failure_keeps_cache(self, resolver, database):
        resolver.search("mum", "India")
        database.add_city.return_value = None

        assert resolver.add_city(NewCity(name="Newtown", country="India")) is None
        assert resolver.get_cache_stats().size == 1

    def test_update_popularity_success_clears_cache(self, resolver, database):
        resolver.search("mum", "India")
        database.update_city_popularity.return_value = True

        assert resolver.update_city_popularity("abc", True) is True
        database.update_city_popularity.assert_called_once_with("abc", True)
        assert resolver.get_cache_stats().size == 0

    def test_update_popularity_failure_keeps_cache(self, resolver, database):
        resolver.search("mum", "India")
        database.update_city_popularity.side_effect = RuntimeError("db down")

        assert resolver.update_city_popularity("abc", True) is False
        assert resolver.get_cache_stats().size == 1


def test_resolvers_do_not_share_cache(database, geocoder, gazetteer, resolver_config):
    from location_resolver.adapters.cache import InMemoryCache

    first = LocationResolverService(
        database=database,
        geocoder=geocoder,
        gazetteer=gazetteer,
        cache=InMemoryCache(default_ttl_seconds=300, max_size=10),
        config=resolver_config,
    )
    second = LocationResolverService(
        database=database,
        geocoder=geocoder,
        gazetteer=gazetteer,
        cache=InMemoryCache(default_ttl_seconds=300, max_size=10),
        config=resolver_config,
    )

    first.search("mum", "India")

    assert second.get_cache_stats().size == 0
