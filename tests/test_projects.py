import tempfile
import unittest
from services.config.cache import ConfigCache
from services.costing.inputs import InvalidInput
from services.projects.service import PROJECTS_COLLECTION, ProjectNotFound, ProjectService
from services.roi.engine import ROIEngine
from services.storage.documents import DocumentStore
from services.storage.settings_repo import SettingsRepository


PAYLOAD = {
    "projectName": "Invoice intake",
    "ownerUid": "u1",
    "inputs": {"volume": 1000, "aht": 10, "fteCost": 3000},
    "complexity": {"numApplications": 1, "dataType": "structured", "environment": ["web"], "numSteps": 5},
    "strategic": {},
}


class TestProjectService(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.store = DocumentStore(self.tmp.name)
        settings = SettingsRepository(self.store)
        cache = ConfigCache(settings)
        settings.attach_cache(cache)
        self.settings = settings
        self.service = ProjectService(self.store, ROIEngine(cache))

    def tearDown(self):
        self.tmp.cleanup()

    def test_create_persists_snapshot(self):
        p = self.service.create_project(PAYLOAD)
        self.assertTrue(p["id"].startswith("p_"))
        self.assertEqual(p["responsible_name"], "Not informed")
        self.assertEqual(p["complexity_score"]["classification"], "VERY_SIMPLE")
        self.assertAlmostEqual(p["results"]["development_cost"], 2016.0)
        self.assertAlmostEqual(p["results"]["roi_year_1"], 43.82)
        self.assertEqual(p["results"]["payback_months"], 1.5)
        stored = self.service.get_project(p["id"])
        self.assertEqual(stored, p)

    def test_create_requires_name(self):
        with self.assertRaises(InvalidInput):
            self.service.create_project({**PAYLOAD, "projectName": "  "})

    def test_create_rejects_negative_volume(self):
        with self.assertRaises(InvalidInput):
            self.service.create_project({**PAYLOAD, "inputs": {"volume": -1, "aht": 10, "fteCost": 3000}})
        self.assertEqual(self.service.list_projects(), [])

    def test_defaults_owner(self):
        p = self.service.create_project({k: v for k, v in PAYLOAD.items() if k != "ownerUid"})
        self.assertEqual(p["owner_uid"], "anonymous")

    def test_list_filters_and_orders(self):
        a = self.service.create_project(PAYLOAD)
        b = self.service.create_project({**PAYLOAD, "projectName": "Second"})
        c = self.service.create_project({**PAYLOAD, "projectName": "Other", "ownerUid": "u2"})
        self.store.update(PROJECTS_COLLECTION, a["id"], {"created_at": "2024-01-01T00:00:00Z"})
        self.store.update(PROJECTS_COLLECTION, b["id"], {"created_at": "2024-02-01T00:00:00Z"})
        self.store.update(PROJECTS_COLLECTION, c["id"], {"created_at": "2024-03-01T00:00:00Z"})

        mine = self.service.list_projects("u1")
        self.assertEqual([p["id"] for p in mine], [b["id"], a["id"]])
        everyone = self.service.list_projects("all")
        self.assertEqual([p["id"] for p in everyone], [c["id"], b["id"], a["id"]])
        self.assertEqual(len(self.service.list_projects(None, limit=1)), 1)

    def test_update_name_only_keeps_results(self):
        p = self.service.create_project(PAYLOAD)
        updated = self.service.update_project(p["id"], {"projectName": "Renamed"})
        self.assertEqual(updated["project_name"], "Renamed")
        self.assertEqual(updated["results"], p["results"])

    def test_update_inputs_recalculates(self):
        p = self.service.create_project(PAYLOAD)
        updated = self.service.update_project(p["id"], {"inputs": {"volume": 2000, "aht": 10, "fteCost": 3000}})
        self.assertEqual(updated["inputs_as_is"]["volume"], 2000.0)
        self.assertAlmostEqual(updated["results"]["as_is_cost_annual"], 75000.0)
        self.assertEqual(updated["complexity_input"], p["complexity_input"])

    def test_update_complexity_keeps_stored_inputs(self):
        p = self.service.create_project(PAYLOAD)
        updated = self.service.update_project(p["id"], {"complexity": {"numApplications": 5, "dataType": "ocr",
                                                                       "environment": ["citrix"], "numSteps": 60}})
        self.assertEqual(updated["complexity_score"]["classification"], "VERY_COMPLEX")
        self.assertEqual(updated["inputs_as_is"], p["inputs_as_is"])
        self.assertAlmostEqual(updated["results"]["as_is_cost_annual"], 37500.0)

    def test_settings_change_applies_on_recalculation(self):
        p = self.service.create_project(PAYLOAD)
        self.settings.update_settings({"infra_costs": {"rpa_license_annual": 0, "virtual_machine_annual": 0}})
        updated = self.service.update_project(p["id"], {"strategic": {}})
        self.assertLess(updated["results"]["to_be_cost_annual"], p["results"]["to_be_cost_annual"])

    def test_delete_and_missing(self):
        p = self.service.create_project(PAYLOAD)
        self.service.delete_project(p["id"])
        with self.assertRaises(ProjectNotFound):
            self.service.get_project(p["id"])
        with self.assertRaises(ProjectNotFound):
            self.service.delete_project(p["id"])
        with self.assertRaises(ProjectNotFound):
            self.service.update_project("p_nothere", {"projectName": "x"})
        with self.assertRaises(ProjectNotFound):
            self.service.get_project("../escape")


if __name__ == "__main__":
    unittest.main()
