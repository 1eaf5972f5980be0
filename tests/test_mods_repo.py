import dataclasses

import pytest

from hearthmods.core.errors import (
    FetchNoResultsError,
    InvalidStatementError,
    ModFetchMultipleResultsError,
    ModFetchNoResultsError,
    ModInsertError,
)
from hearthmods.storage import Mod, ModsRepository


def make_mod(name="Jotunn", namespace="ValheimModding", version="2.20.0", **kwargs):
    return Mod(
        name=name,
        namespace=namespace,
        version=version,
        file_path=f"/srv/valheim/BepInEx/plugins/{namespace}-{name}-{version}",
        website_url="https://github.com/Valheim-Modding/Jotunn",
        description="Jötunn, the Valheim Library.",
        **kwargs,
    )


@pytest.fixture
def repo(db):
    return ModsRepository(db)


def test_insert_then_get(repo):
    repo.insert_mod(make_mod())

    mod = repo.get_mod("Jotunn")

    assert mod.id == 1
    assert mod.namespace == "ValheimModding"
    assert mod.version == "2.20.0"
    assert mod.description == "Jötunn, the Valheim Library."
    assert mod.full_name == "ValheimModding-Jotunn-2.20.0"
    assert mod.dependencies == []


def test_get_unknown_mod_raises_no_results(repo):
    with pytest.raises(ModFetchNoResultsError):
        repo.get_mod("Nope")


def test_no_results_is_a_generic_fetch_no_results(repo):
    with pytest.raises(FetchNoResultsError):
        repo.get_mod("Nope")


def test_duplicate_rows_raise_multiple_results(repo):
    repo.insert_mod(make_mod())
    repo.insert_mod(make_mod(version="2.21.0"))
    with pytest.raises(ModFetchMultipleResultsError):
        repo.get_mod("Jotunn")


def test_list_mods_in_insert_order(repo):
    assert repo.list_mods() == []
    repo.insert_mod(make_mod("B"))
    repo.insert_mod(make_mod("A"))
    assert [m.name for m in repo.list_mods()] == ["B", "A"]


def test_upsert_updates_existing_record_in_place(repo):
    repo.insert_mod(make_mod())
    original_id = repo.get_mod("Jotunn").id

    repo.upsert_mod(make_mod(version="2.21.0", framework_id=1))

    mods = repo.list_mods()
    assert len(mods) == 1
    assert mods[0].id == original_id
    assert mods[0].version == "2.21.0"
    assert mods[0].framework_id == 1


def test_upsert_inserts_unknown_mod(repo):
    repo.insert_mod(make_mod())
    repo.upsert_mod(make_mod("ServerDevcommands", "JereKuusela", "1.80.0"))
    assert [m.id for m in repo.list_mods()] == [1, 2]


def test_update_mod_by_id(repo):
    repo.insert_mod(make_mod())
    current = repo.get_mod("Jotunn")
    repo.update_mod(dataclasses.replace(current, description="updated"))
    assert repo.get_mod("Jotunn").description == "updated"


def test_delete_mod_matches_name_and_namespace(repo):
    repo.insert_mod(make_mod())
    repo.delete_mod("Jotunn", "SomeoneElse")
    assert len(repo.list_mods()) == 1

    repo.delete_mod("Jotunn", "ValheimModding")
    assert repo.list_mods() == []


def test_delete_all_keeps_table(repo):
    repo.insert_mod(make_mod("A"))
    repo.insert_mod(make_mod("B"))

    repo.delete_all_mods()

    assert repo.list_mods() == []
    repo.insert_mod(make_mod("C"))
    assert len(repo.list_mods()) == 1


def test_failed_insert_rolls_back(repo, db):
    with pytest.raises(ModInsertError):
        repo.insert_mod(make_mod(name=None))
    assert not db.in_transaction
    assert repo.list_mods() == []


def test_incomplete_statement_is_rejected(repo, db):
    with pytest.raises(InvalidStatementError):
        repo._execute("UPDATE mods SET name = 'unterminated", (), ModInsertError)
    assert not db.in_transaction
