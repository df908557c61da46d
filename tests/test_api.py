import tempfile
import unittest

import services.api.server as server
from services.api.server import app


CALC_PAYLOAD = {
    "inputs": {"volume": 1000, "aht": 10, "fteCost": 3000},
    "complexity": {"numApplications": 1, "dataType": "structured", "environment": ["web"], "numSteps": 5},
    "strategic": {},
}


class APITestCase(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        server.init_services(self.tmp.name)
        app.testing = True
        app.config['API_KEY'] = None
        app.config['RATE_LIMIT_N'] = 0
        server._recent.clear()
        self.client = app.test_client()

    def tearDown(self):
        self.tmp.cleanup()


class TestCalculationAPI(APITestCase):
    def test_calculate_reference_case(self):
        rv = self.client.post('/api/calculate', json=CALC_PAYLOAD)
        self.assertEqual(rv.status_code, 200)
        body = rv.get_json()
        self.assertTrue(body['success'])
        data = body['data']
        self.assertEqual(data['complexity']['classification'], 'VERY_SIMPLE')
        self.assertAlmostEqual(data['costs']['development'], 2016.0)
        self.assertAlmostEqual(data['roi']['year1'], 43.82)
        self.assertEqual(data['roi']['paybackMonths'], 1.5)

    def test_calculate_rejects_bad_numbers(self):
        rv = self.client.post('/api/calculate', json={**CALC_PAYLOAD, 'inputs': {'volume': 'many'}})
        self.assertEqual(rv.status_code, 400)
        self.assertEqual(rv.get_json()['error'], 'volume must be a number')
        rv = self.client.post('/api/calculate', json={**CALC_PAYLOAD, 'inputs': {'volume': -5}})
        self.assertEqual(rv.status_code, 400)

    def test_settings_write_reflected_in_next_calculation(self):
        before = self.client.post('/api/calculate', json=CALC_PAYLOAD).get_json()['data']
        self.assertAlmostEqual(before['costs']['toBe']['licenseCost'], 15000.0)
        rv = self.client.put('/api/settings', json={'infra_costs': {'rpa_license_annual': 0}})
        self.assertEqual(rv.status_code, 200)
        after = self.client.post('/api/calculate', json=CALC_PAYLOAD).get_json()['data']
        self.assertEqual(after['costs']['toBe']['licenseCost'], 0.0)
        self.assertGreater(after['roi']['annualSavings'], before['roi']['annualSavings'])

    def test_config_unavailable_is_503(self):
        def broken():
            raise OSError('storage offline')
        server.SERVICES.settings.fetch_global_configuration = broken
        rv = self.client.post('/api/calculate', json=CALC_PAYLOAD)
        self.assertEqual(rv.status_code, 503)
        self.assertEqual(rv.get_json()['error'], 'config_unavailable')

    def test_complexity_score_preview(self):
        rv = self.client.post('/api/complexity/score?withDevelopment=1', json=CALC_PAYLOAD['complexity'])
        data = rv.get_json()['data']
        self.assertEqual(data['totalPoints'], 4)
        self.assertEqual(data['classification'], 'VERY_SIMPLE')
        self.assertAlmostEqual(data['development']['cost'], 2016.0)
        rv = self.client.post('/api/complexity/score', json={'useRpaLicense': 'no'})
        self.assertNotIn('development', rv.get_json()['data'])

    def test_projection(self):
        rv = self.client.post('/api/projection', json={**CALC_PAYLOAD, 'months': 12})
        data = rv.get_json()['data']
        self.assertEqual(len(data['rows']), 12)
        self.assertEqual(data['breakevenMonth'], 2)
        rv = self.client.post('/api/projection', json={**CALC_PAYLOAD, 'months': 500})
        self.assertEqual(rv.status_code, 400)

    def test_projection_months_checked_before_calculating(self):
        rv = self.client.post('/api/projection', json={**CALC_PAYLOAD, 'months': 'abc'})
        self.assertEqual(rv.status_code, 400)
        self.assertEqual(rv.get_json()['error'], 'months must be an integer')

        def broken():
            raise OSError('storage offline')
        server.SERVICES.settings.fetch_global_configuration = broken
        rv = self.client.post('/api/projection', json={**CALC_PAYLOAD, 'months': -1})
        self.assertEqual(rv.status_code, 400)

    def test_complexity_score_rejects_non_numeric_counts(self):
        rv = self.client.post('/api/complexity/score', json={'numSteps': 'lots'})
        self.assertEqual(rv.status_code, 400)
        self.assertEqual(rv.get_json()['error'], 'numSteps must be a number')

    def test_fleet_estimate_uses_stored_defaults(self):
        rv = self.client.post('/api/estimates/fleet', json={})
        self.assertEqual(rv.get_json()['data']['estimate']['totalCurrentRobots'], 51)
        self.client.put('/api/settings', json={'annual_cost_estimate': {'robots24h': 10, 'robots12h': 0}})
        rv = self.client.post('/api/estimates/fleet', json={'robots12h': 5})
        self.assertEqual(rv.get_json()['data']['estimate']['totalCurrentRobots'], 15)


class TestSettingsAPI(APITestCase):
    def test_default_view_before_first_save(self):
        data = self.client.get('/api/settings').get_json()['data']
        self.assertEqual(data['team_composition'], [])
        self.assertEqual(data['infra_costs']['rpa_license_annual'], 0.0)
        self.assertEqual(data['annual_cost_estimate']['robots24h'], 33)

    def test_put_requires_payload(self):
        rv = self.client.put('/api/settings', json={})
        self.assertEqual(rv.status_code, 400)

    def test_non_list_team_is_rejected(self):
        rv = self.client.put('/api/settings', json={'team_composition': 5})
        self.assertEqual(rv.status_code, 400)
        self.assertEqual(rv.get_json()['error'], 'team_composition must be a list')

    def test_corrupt_stored_team_does_not_break_calculations(self):
        server.SERVICES.store.set('settings', 'global_config', {'team_composition': 5})
        self.assertEqual(self.client.get('/api/settings').status_code, 200)
        rv = self.client.post('/api/calculate', json=CALC_PAYLOAD)
        self.assertEqual(rv.status_code, 200)
        self.assertAlmostEqual(rv.get_json()['data']['costs']['development'], 2016.0)

    def test_saved_team_reports_costs(self):
        team = [{'role': 'Dev', 'rate': 100, 'shares': {'medium': 1}}]
        self.client.put('/api/settings', json={'team_composition': team})
        data = self.client.get('/api/settings').get_json()['data']
        self.assertEqual(data['team_composition'][0]['role'], 'Dev')
        self.assertEqual(data['baselines']['medium'], 168.0)
        self.assertEqual(data['calculated_costs']['medium'], 16800.0)


class TestProjectsAPI(APITestCase):
    def _create(self, **extra):
        rv = self.client.post('/api/projects', json={**CALC_PAYLOAD, 'projectName': 'Invoices', **extra})
        self.assertEqual(rv.status_code, 201)
        return rv.get_json()['data']

    def test_crud(self):
        p = self._create(ownerUid='u1')
        pid = p['id']
        rv = self.client.get(f'/api/projects/{pid}')
        self.assertEqual(rv.get_json()['data']['project_name'], 'Invoices')

        listed = self.client.get('/api/projects?ownerUid=u1').get_json()['data']
        self.assertEqual([x['id'] for x in listed], [pid])
        self.assertEqual(self.client.get('/api/projects?ownerUid=u2').get_json()['data'], [])

        rv = self.client.put(f'/api/projects/{pid}', json={'inputs': {'volume': 2000, 'aht': 10, 'fteCost': 3000}})
        self.assertAlmostEqual(rv.get_json()['data']['results']['as_is_cost_annual'], 75000.0)

        rv = self.client.delete(f'/api/projects/{pid}')
        self.assertEqual(rv.status_code, 200)
        self.assertEqual(self.client.get(f'/api/projects/{pid}').status_code, 404)

    def test_missing_name_is_400(self):
        rv = self.client.post('/api/projects', json=CALC_PAYLOAD)
        self.assertEqual(rv.status_code, 400)
        self.assertEqual(rv.get_json()['error'], 'projectName is required')

    def test_unknown_project_is_404(self):
        self.assertEqual(self.client.get('/api/projects/p_missing').status_code, 404)
        self.assertEqual(self.client.put('/api/projects/p_missing', json={'projectName': 'x'}).status_code, 404)
        self.assertEqual(self.client.delete('/api/projects/p_missing').status_code, 404)

    def test_bad_limit(self):
        self.assertEqual(self.client.get('/api/projects?limit=abc').status_code, 400)

    def test_delivery_plan(self):
        pid = self._create()['id']
        data = self.client.get(f'/api/projects/{pid}/delivery-plan').get_json()['data']
        self.assertEqual(data['classification'], 'VERY_SIMPLE')
        self.assertEqual(len(data['phases']), 6)
        self.assertEqual(data['phases'][0]['phase'], 'Requirements gathering')
        last = data['phases'][-1]
        self.assertEqual(data['totalDays'], last['start'] + last['duration'])


if __name__ == '__main__':
    unittest.main()
