"""
Tests for catalog loading and caching.
"""

import threading

import pytest

from volunteermatch import catalog as catalog_module
from volunteermatch.catalog import (
    Catalog,
    get_role_by_id,
    get_roles,
    invalidate_caches,
    is_valid_path,
    normalize_country_record,
    read_json_file,
)
from volunteermatch.config import Settings
from volunteermatch.errors import DatasetError


class TestIsValidPath:
    """Path predicate."""

    @pytest.mark.parametrize("value", ["help_hospitals", "post_disaster", "green_workforce"])
    def test_known_paths(self, value):
        """The three impact paths are accepted."""
        assert is_valid_path(value)

    @pytest.mark.parametrize("value", ["invalid_path", "", "Help_Hospitals", None, 3])
    def test_unknown_paths(self, value):
        """Anything else, including other casings and non-strings, is rejected."""
        assert not is_valid_path(value)


class TestLoading:
    """Dataset parsing."""

    def test_loads_risk_and_roles(self, catalog):
        """Both datasets load in file order with nested lessons parsed."""
        risks = catalog.get_risk_snapshots()
        roles = catalog.get_roles()

        assert [r.country for r in risks] == ["Kenya", "Philippines", "Iceland"]
        assert len(roles) == 5
        assert roles[1].id == "role_06"
        assert roles[1].microlearning[0].title == "Psychological first aid"

    def test_missing_hazard_defaults_to_neutral(self, tmp_path, dataset_writer):
        """Hazards absent from a risk record default to 0.5."""
        dataset_writer(tmp_path, "risk_by_country.json", [{"country": "Chile", "flood": 0.3, "source": "test"}])
        snapshot = Catalog(Settings(data_dir=tmp_path)).get_risk_snapshots()[0]

        assert snapshot.flood == 0.3
        assert snapshot.cyclone == 0.5
        assert snapshot.heat == 0.5

    def test_out_of_range_hazard_is_clamped(self, tmp_path, dataset_writer):
        """Risk values outside [0, 1] are clamped on load."""
        dataset_writer(tmp_path, "risk_by_country.json", [{"country": "Chile", "flood": 1.4, "heat": -0.2}])
        snapshot = Catalog(Settings(data_dir=tmp_path)).get_risk_snapshots()[0]

        assert snapshot.flood == 1.0
        assert snapshot.heat == 0.0

    def test_missing_file_raises(self, tmp_path):
        """A missing dataset file is a DatasetError."""
        with pytest.raises(DatasetError, match="missing"):
            Catalog(Settings(data_dir=tmp_path)).get_roles()

    def test_empty_list_raises(self, tmp_path, dataset_writer):
        """An empty dataset is a DatasetError."""
        dataset_writer(tmp_path, "roles.json", [])
        with pytest.raises(DatasetError, match="empty"):
            Catalog(Settings(data_dir=tmp_path)).get_roles()

    def test_blank_file_raises(self, tmp_path):
        (tmp_path / "roles.json").write_text("   ")
        with pytest.raises(DatasetError):
            read_json_file(tmp_path / "roles.json", "Role")

    def test_invalid_json_raises(self, tmp_path):
        """Unparseable JSON is a DatasetError."""
        (tmp_path / "roles.json").write_text("{not json")
        with pytest.raises(DatasetError, match="not valid JSON"):
            Catalog(Settings(data_dir=tmp_path)).get_roles()

    def test_malformed_role_raises(self, tmp_path, dataset_writer):
        """A bad entry is reported with its index."""
        dataset_writer(tmp_path, "roles.json", [{"id": "r1", "title": "R", "path": "moon_base"}])
        with pytest.raises(DatasetError, match="entry 0"):
            Catalog(Settings(data_dir=tmp_path)).get_roles()

    def test_non_numeric_hazard_raises(self, tmp_path, dataset_writer):
        dataset_writer(tmp_path, "risk_by_country.json", [{"country": "Chile", "flood": "high"}])
        with pytest.raises(DatasetError):
            Catalog(Settings(data_dir=tmp_path)).get_risk_snapshots()

    def test_duplicate_role_ids_raise(self, tmp_path, dataset_writer, roles_data):
        """Role ids must be unique."""
        dataset_writer(tmp_path, "roles.json", roles_data + [roles_data[0]])
        with pytest.raises(DatasetError, match="duplicate"):
            Catalog(Settings(data_dir=tmp_path)).get_roles()


class TestCaching:
    """Load-once and invalidate lifecycle."""

    def test_second_call_uses_cache(self, catalog, data_dir):
        """Later calls return the cached list without rereading."""
        first = catalog.get_roles()
        (data_dir / "roles.json").unlink()

        assert catalog.get_roles() is first

    def test_invalidate_rereads(self, catalog, data_dir):
        """invalidate forces the next call to read from disk."""
        catalog.get_roles()
        catalog.invalidate()
        (data_dir / "roles.json").unlink()

        with pytest.raises(DatasetError):
            catalog.get_roles()

    def test_concurrent_first_load_reads_once(self, catalog, monkeypatch):
        """Racing first loads read the file only once."""
        calls = []
        original = catalog_module.read_json_file

        def counting_read(path, label):
            calls.append(label)
            return original(path, label)

        monkeypatch.setattr(catalog_module, "read_json_file", counting_read)

        results = []
        barrier = threading.Barrier(8)

        def load():
            barrier.wait()
            results.append(catalog.get_roles())

        threads = [threading.Thread(target=load) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert calls == ["Role"]
        assert all(r is results[0] for r in results)

    def test_module_level_accessors_follow_env(self, data_dir, monkeypatch):
        """Module accessors load from VOLUNTEERMATCH_DATA_DIR."""
        monkeypatch.setenv("VOLUNTEERMATCH_DATA_DIR", str(data_dir))
        invalidate_caches()

        assert len(get_roles()) == 5


class TestCountries:
    """Country directory normalization."""

    def test_normalizes_and_sorts(self, catalog):
        """Alternate key spellings are normalized and names sorted."""
        countries = catalog.get_countries()

        assert [c.name for c in countries] == ["Bangladesh", "Kenya"]
        bangladesh, kenya = countries
        assert kenya.iso2 == "KE"
        assert kenya.iso3 == "KEN"
        assert bangladesh.income_group == "Lower middle income"
        assert bangladesh.population == 172954319

    def test_incomplete_record_dropped(self):
        """Records without both ISO codes are skipped."""
        assert normalize_country_record({"name": "Atlantis", "iso2": "AT"}) is None
        assert normalize_country_record("Kenya") is None

    def test_all_records_unusable_raises(self, tmp_path, dataset_writer):
        """A directory with no usable country is a DatasetError."""
        dataset_writer(tmp_path, "countries.json", [{"country": "Atlantis"}])
        with pytest.raises(DatasetError):
            Catalog(Settings(data_dir=tmp_path)).get_countries()


class TestNews:
    """News feed filtering."""

    def test_no_filters(self, catalog):
        """Without filters every item is returned."""
        assert len(catalog.get_news()) == 3

    def test_country_filter_is_case_insensitive(self, catalog):
        """Country matching ignores case and surrounding whitespace."""
        items = catalog.get_news(country="  kenya ")
        assert [i.title for i in items] == ["Cooling centers open", "Flood assessment teams deploy"]

    def test_topic_filter(self, catalog):
        """Topic matching ignores case."""
        items = catalog.get_news(topic="DISASTER")
        assert [i.title for i in items] == ["Flood assessment teams deploy", "Cyclone drill"]

    def test_combined_filters(self, catalog):
        assert catalog.get_news(country="India", topic="climate") == []


class TestRoleLookup:
    """Role lookup by id."""

    def test_found(self, catalog):
        """A known id returns its role."""
        assert get_role_by_id("role_04", catalog.get_roles()).title == "Shelter Coordinator"

    def test_missing(self, catalog):
        """An unknown id returns None."""
        assert get_role_by_id("role_99", catalog.get_roles()) is None
