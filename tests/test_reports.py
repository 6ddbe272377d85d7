# tests/test_reports.py
import csv
import io

import pytest

from app.security import create_access_token
from app.services.reports import ReportsService, to_csv
from conftest import add_dog, http


@pytest.fixture
def reports(dogs_repo, litters_repo, puppies_repo, events_repo):
    return ReportsService(dogs_repo, litters_repo, puppies_repo, events_repo)

@pytest.fixture
def kennel(dogs_repo, litters_repo, puppies_repo, events_repo):
    rex = add_dog(dogs_repo, "Rex", "male", status="breeding", chip_number="981000")
    add_dog(dogs_repo, "Kira", "female", status="retired")
    add_dog(dogs_repo, "Zeus", "male", status="coowned", titles=[{"title": "CH"}])
    bella = add_dog(dogs_repo, "Bella", "female", status="active")
    litters_repo.add(name="A", status="born", mating_date="2024-01-10", dam_id=bella, sire_id=rex,
                     puppies_born_count=6, puppies_alive_count=5)
    litters_repo.add(name="B", status="pregnant", mating_date="2024-03-02")
    litters_repo.add(name="C", status="planned")
    litters_repo.add(name="D", status="born", mating_date="2023-05-01", puppies_born_count=4, puppies_alive_count=4)
    puppies_repo.add(litter_id="a", identifier="M-1", sex="male", status="available", birth_order=1)
    puppies_repo.add(litter_id="a", identifier="F-2", sex="female", status="sold", birth_order=2)
    puppies_repo.add(litter_id="a", identifier="F-3", sex="female", status="returned", birth_order=3)
    for event_type, entity_type, when in (
        ("vaccine", "dog", "2024-01-05"),
        ("vaccine", "puppy", "2024-02-05"),
        ("exam", "dog", "2024-03-01"),
        ("heat", "dog", "2024-02-01"),
    ):
        events_repo.add(entity_type=entity_type, entity_id=rex, event_type=event_type,
                        event_date=when, payload={"name": "x"})

@pytest.mark.asyncio
async def test_stock_report(reports, kennel):
    report = await reports.stock()
    assert [d["name"] for d in report["data"]] == ["Bella", "Kira", "Rex", "Zeus"]
    assert report["summary"] == {
        "total": 4, "males": 2, "females": 2, "active": 1, "breeding": 1, "retired": 1, "coowned": 1,
    }
    assert len(report["generated_at"]) == len("2024-01-01 00:00:00")

    females = await reports.stock(sex="female")
    assert females["summary"]["total"] == 2

@pytest.mark.asyncio
async def test_litters_report_date_range(reports, kennel):
    report = await reports.litters_report(start="2024-01-01", end="2024-02-28")
    # las camadas sin fecha no se descartan
    assert sorted(litter["name"] for litter in report["data"]) == ["A", "C"]
    assert report["summary"]["by_status"] == {"born": 1, "planned": 1}
    assert report["summary"]["total_puppies_born"] == 6
    assert report["summary"]["total_puppies_alive"] == 5
    first = next(litter for litter in report["data"] if litter["name"] == "A")
    assert (first["dam_name"], first["sire_name"]) == ("Bella", "Rex")

    everything = await reports.litters_report()
    assert everything["summary"]["total"] == 4
    assert everything["summary"]["total_puppies_born"] == 10

@pytest.mark.asyncio
async def test_puppies_report(reports, kennel):
    summary = (await reports.puppies_report())["summary"]
    assert summary["by_status"] == {
        "available": 1, "reserved": 0, "sold": 1, "retained": 0, "deceased": 0,
    }
    assert summary["total"] == 3
    assert (summary["males"], summary["females"]) == (1, 2)

@pytest.mark.asyncio
async def test_health_report(reports, kennel):
    report = await reports.health_report()
    assert [e["event_type"] for e in report["data"]] == ["exam", "vaccine", "vaccine"]
    assert report["summary"]["by_type"] == {"exam": 1, "vaccine": 2}
    assert report["summary"]["by_entity_type"] == {"dog": 2, "puppy": 1}

    january = await reports.health_report(start="2024-01-01", end="2024-01-31")
    assert january["summary"]["total"] == 1

    puppies = await reports.health_report(entity_type="puppy")
    assert puppies["summary"]["by_entity_type"] == {"puppy": 1}

def test_to_csv_encodes_lists():
    out = to_csv(
        [{"name": "Zeus", "titles": [{"title": "CH"}], "color": None}],
        ["name", "titles", "color"],
        ["Nombre", "Títulos", "Color"],
    )
    rows = list(csv.reader(io.StringIO(out)))
    assert rows == [["Nombre", "Títulos", "Color"], ["Zeus", '[{"title": "CH"}]', ""]]

@pytest.mark.asyncio
async def test_reports_api(auth_app, kennel):
    async with http(auth_app) as ac:
        resp = await ac.get("/reports/stock", params={"status": "breeding"})
        assert resp.status_code == 200
        assert [d["name"] for d in resp.json()["data"]] == ["Rex"]

        resp = await ac.get("/reports/stock", params={"format": "csv"})
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/csv")
        assert "attachment" in resp.headers["content-disposition"]
        rows = list(csv.reader(io.StringIO(resp.text)))
        assert rows[0] == ["Nombre", "Raza", "Sexo", "Nacimiento", "Estado", "Registro", "Microchip", "Color"]
        assert rows[3][0] == "Rex" and rows[3][6] == "981000"

        resp = await ac.get("/reports/litters", params={"start": "2024-03-01"})
        assert sorted(litter["name"] for litter in resp.json()["data"]) == ["B", "C"]

        resp = await ac.get("/reports/puppies", params={"status": "sold"})
        assert resp.json()["summary"]["total"] == 1

        resp = await ac.get("/reports/health", params={"event_type": "heat"})
        assert resp.status_code == 400

        resp = await ac.get("/reports/health", params={"format": "csv"})
        assert len(list(csv.reader(io.StringIO(resp.text)))) == 4

        resp = await ac.get("/reports/stock", params={"format": "pdf"})
        assert resp.status_code == 422

@pytest.mark.asyncio
async def test_reports_require_view_reports(anon_app):
    headers = {"Authorization": f"Bearer {create_access_token('user-2', ['manage_dogs'])}"}
    async with http(anon_app) as ac:
        resp = await ac.get("/reports/stock", headers=headers)
        assert resp.status_code == 403
