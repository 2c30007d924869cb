"""
Tests for the project list, editing, per-language titles and reordering.
"""
import io
import os
import sys
import time
import unittest
from unittest.mock import patch

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from steelbuckle.__tests__.api_testcase import ApiTestCase
from steelbuckle.models.project import PLACEHOLDER_IMAGE, Project


class TestProjectsApi(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.login()

    def create(self, title, language='en', **fields):
        return self.post_json('/api/projects', dict(fields, title=title, year='2024', language=language))

    def test_create_appends_in_display_order(self):
        first = self.create('Valga Station')
        second = self.create('Liepaja Station')
        self.assertEqual(first.status_code, 201)
        self.assertEqual(first.get_json()['displayOrder'], 0)
        self.assertEqual(second.get_json()['displayOrder'], 1)
        self.assertEqual(first.get_json()['image'], PLACEHOLDER_IMAGE)

        listed = self.client.get('/api/projects?lang=en').get_json()
        self.assertEqual([p['title'] for p in listed], ['Valga Station', 'Liepaja Station'])

    def test_create_requires_title(self):
        self.assertEqual(self.post_json('/api/projects', {'year': '2020'}).status_code, 400)

    def test_numeric_year_is_stored_as_text(self):
        response = self.post_json('/api/projects', {'title': 'Bridge', 'year': 2023, 'language': 'en'})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.get_json()['year'], '2023')

        project_id = response.get_json()['id']
        response = self.put_json(f"/api/projects/{project_id}", {'year': 2024, 'language': 'en'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()['year'], '2024')

    def test_non_string_fields_are_rejected(self):
        response = self.post_json('/api/projects', {'title': 42, 'language': 'en'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['error'], 'title must be a string')
        self.assertEqual(self.post_json('/api/projects', {'title': 'Bridge', 'year': [2023]}).status_code, 400)

    def test_create_with_uploaded_image(self):
        response = self.client.post(
            '/api/projects',
            data={'title': 'Muuga', 'year': '2021', 'language': 'et', 'image': (io.BytesIO(b'img'), 'muuga.jpg', 'image/jpeg')},
            headers=self.csrf_headers(),
            content_type='multipart/form-data',
        )
        self.assertEqual(response.status_code, 201)
        self.assertIn('/media/projects/muuga.jpg', response.get_json()['image'])
        self.assertEqual(self.media_host.uploads[0]['folder'], 'media/projects')

    def test_create_with_image_url(self):
        response = self.create('Bolderaja', imageUrl='https://example.test/bolderaja.jpg')
        self.assertEqual(response.get_json()['image'], 'https://example.test/bolderaja.jpg')

    def test_list_uses_requested_language(self):
        project_id = self.create('Valga Station').get_json()['id']
        self.post_json(f"/api/projects/{project_id}/translations", {'translations': {'et': 'Valga raudteejaam'}})
        listed = self.client.get('/api/projects?lang=et').get_json()
        self.assertEqual(listed[0]['title'], 'Valga raudteejaam')

    def test_get_update_delete(self):
        project_id = self.create('Valga Station').get_json()['id']
        self.assertEqual(self.client.get(f"/api/projects/{project_id}?lang=en").get_json()['title'], 'Valga Station')

        response = self.put_json(f"/api/projects/{project_id}", {'year': '2019', 'title': 'Valga Railway Station', 'language': 'en'})
        self.assertEqual(response.status_code, 200)
        body = response.get_json()
        self.assertEqual(body['year'], '2019')
        self.assertEqual(body['title'], 'Valga Railway Station')
        self.assertEqual(body['image'], PLACEHOLDER_IMAGE)

        response = self.client.delete(f"/api/projects/{project_id}", headers=self.csrf_headers())
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.client.get(f"/api/projects/{project_id}").status_code, 404)

    def test_unknown_project(self):
        self.assertEqual(self.client.get('/api/projects/missing').status_code, 404)
        self.assertEqual(self.client.delete('/api/projects/missing', headers=self.csrf_headers()).status_code, 404)

    def test_translations_skip_empty_titles(self):
        project_id = self.create('Valga Station').get_json()['id']
        response = self.post_json('/api/projects/translations', {
            'projectId': project_id,
            'translations': {'et': 'Valga raudteejaam', 'ru': '', 'lv': '   '},
        })
        self.assertEqual(response.status_code, 200)
        titles = self.client.get(f"/api/projects/{project_id}/translations").get_json()
        self.assertEqual(titles, {'en': 'Valga Station', 'et': 'Valga raudteejaam'})

    def test_translations_require_project_id(self):
        response = self.post_json('/api/projects/translations', {'translations': {'et': 'x'}})
        self.assertEqual(response.status_code, 400)

    def test_reorder(self):
        ids = [self.create(title).get_json()['id'] for title in ('A', 'B', 'C')]
        response = self.post_json('/api/projects/reorder', {'orderUpdates': [
            {'id': ids[0], 'displayOrder': 2},
            {'id': ids[2], 'displayOrder': 0},
        ]})
        self.assertEqual(response.status_code, 200)
        listed = self.client.get('/api/projects?lang=en').get_json()
        self.assertEqual([p['title'] for p in listed], ['C', 'B', 'A'])

    def test_reorder_is_all_or_nothing(self):
        ids = [self.create(title).get_json()['id'] for title in ('A', 'B')]
        response = self.post_json('/api/projects/reorder', {'orderUpdates': [
            {'id': ids[0], 'displayOrder': 5},
            {'id': 'missing', 'displayOrder': 0},
        ]})
        self.assertEqual(response.status_code, 404)
        listed = self.client.get('/api/projects?lang=en').get_json()
        self.assertEqual([p['displayOrder'] for p in listed], [0, 1])

    def test_reorder_requires_list(self):
        self.assertEqual(self.post_json('/api/projects/reorder', {'orderUpdates': {}}).status_code, 400)

    def test_slow_query_times_out(self):
        self.app.config['PROJECTS_QUERY_TIMEOUT'] = 0.05

        def slow(_lang):
            time.sleep(0.5)
            return []

        with patch.object(Project, 'list_for_language', side_effect=slow):
            response = self.client.get('/api/projects')
        self.assertEqual(response.status_code, 504)
        self.assertFalse(response.get_json()['success'])

    def test_mutations_require_login(self):
        self.post_json('/api/auth/logout', {})
        self.assertEqual(self.create('Anonymous').status_code, 401)


class TestSeededProjects(ApiTestCase):

    def test_seed_is_idempotent(self):
        self.seed()
        first = self.client.get('/api/projects?lang=en').get_json()
        self.seed()
        second = self.client.get('/api/projects?lang=en').get_json()
        self.assertEqual(len(first), 11)
        self.assertEqual([p['id'] for p in first], [p['id'] for p in second])
        self.assertTrue(all(p['image'].startswith('https://') for p in first))


if __name__ == '__main__':
    unittest.main()
