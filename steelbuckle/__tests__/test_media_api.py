"""
Tests for media reference lookups, uploads, reference updates and deletion.
"""
import io
import os
import sys
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from steelbuckle.__tests__.api_testcase import ApiTestCase
from steelbuckle.models.media import Media, MediaReference
from steelbuckle.utils.media_resolver import strip_cache_bust

SEEDED_BASE = 'https://res.cloudinary.com/dxr4omqbd/image/upload/v1744754188/media'


class TestMediaRead(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.seed()

    def test_single_key(self):
        response = self.client.get('/api/media?key=site.logo&_t=42')
        self.assertEqual(response.status_code, 200)
        body = response.get_json()
        self.assertEqual(body['referenceKey'], 'site.logo')
        self.assertEqual(body['mediaPath'], f"{SEEDED_BASE}/logo.svg?_t=42")

    def test_missing_key_is_404(self):
        response = self.client.get('/api/media?key=nowhere.image')
        self.assertEqual(response.status_code, 404)

    def test_keys_mapping(self):
        body = self.client.get('/api/media?keys=site.logo,about.main_image,missing.key&_t=1').get_json()
        self.assertEqual(set(body), {'site.logo', 'about.main_image'})
        self.assertTrue(body['about.main_image'].endswith('/Shkirotava_(14).jpg?_t=1'))

    def test_page_prefix_includes_page_suffix_keys(self):
        body = self.client.get('/api/media?pageId=railway_maintenance').get_json()
        self.assertEqual(
            set(body),
            {'railway_maintenance_page.images.first_image', 'railway_maintenance_page.images.second_image'},
        )

    def test_without_selector_lists_urls(self):
        body = self.client.get('/api/media').get_json()
        self.assertIn('items', body)
        self.assertTrue(all('_t=' in url for url in body['items']))

    def test_library_items(self):
        items = self.client.get('/api/media/library').get_json()['items']
        self.assertTrue(items)
        self.assertTrue({'id', 'filename', 'url', 'publicId', 'altText'} <= set(items[0]))


class TestMediaUpload(ApiTestCase):

    def upload(self, data=b'\x89PNG fake', filename='bridge.png', content_type='image/png', **form):
        form['file'] = (io.BytesIO(data), filename, content_type)
        return self.client.post(
            '/api/media/upload', data=form, headers=self.csrf_headers(), content_type='multipart/form-data'
        )

    def test_upload_requires_login(self):
        self.assertEqual(self.upload().status_code, 401)

    def test_upload_records_media_and_reference(self):
        self.login()
        response = self.upload(referenceKey='about.main_image')
        self.assertEqual(response.status_code, 200)
        body = response.get_json()
        self.assertEqual(body['publicId'], 'media/bridge')
        self.assertEqual(body['referenceKey'], 'about.main_image')
        self.assertIn('_t=', body['url'])

        mapped = self.client.get('/api/media?key=about.main_image').get_json()
        self.assertEqual(strip_cache_bust(mapped['mediaPath']), strip_cache_bust(body['url']))
        self.assertEqual(strip_cache_bust(body['url']), 'https://res.cloudinary.com/test/image/upload/v1/media/bridge.png')

    def test_rejects_disallowed_type(self):
        self.login()
        response = self.upload(filename='notes.txt', content_type='text/plain')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.media_host.uploads, [])

    def test_rejects_oversized_file(self):
        self.login()
        self.app.config['MAX_UPLOAD_BYTES'] = 10
        response = self.upload(data=b'x' * 11)
        self.assertEqual(response.status_code, 400)

    def test_missing_file(self):
        self.login()
        response = self.client.post('/api/media/upload', data={}, headers=self.csrf_headers())
        self.assertEqual(response.status_code, 400)

    def test_host_failure_is_500_and_nothing_recorded(self):
        self.login()
        self.media_host.fail_upload = True
        response = self.upload()
        self.assertEqual(response.status_code, 500)
        with self.app.app_context():
            self.assertEqual(Media.query.count(), 0)


class TestMediaUpdate(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.seed()
        self.login()

    def test_repoint_to_existing_asset(self):
        response = self.post_json('/api/media/update', {'updates': [
            {'referenceKey': 'site.logo', 'mediaPath': f"{SEEDED_BASE}/Remont_2.jpg?_t=123"},
        ]})
        self.assertEqual(response.status_code, 200)
        path = self.client.get('/api/media?key=site.logo').get_json()['mediaPath']
        self.assertTrue(path.startswith(f"{SEEDED_BASE}/Remont_2.jpg?_t="))

    def test_new_reference_key_is_created(self):
        self.post_json('/api/media/update', {'updates': [
            {'referenceKey': 'contact.map_image', 'mediaPath': f"{SEEDED_BASE}/logo.svg"},
        ]})
        self.assertEqual(self.client.get('/api/media?key=contact.map_image').status_code, 200)

    def test_unknown_hosted_url_is_registered(self):
        url = 'https://res.cloudinary.com/test/image/upload/v5/media/fresh.jpg'
        response = self.post_json('/api/media/update', {'updates': [{'referenceKey': 'site.logo', 'mediaPath': url}]})
        self.assertEqual(response.status_code, 200)
        with self.app.app_context():
            media = Media.find_by_path(url)
            self.assertEqual(media.cloudinary_id, 'media/fresh')

    def test_partial_failure_is_207(self):
        response = self.post_json('/api/media/update', {'updates': [
            {'referenceKey': 'site.logo', 'mediaPath': f"{SEEDED_BASE}/logo.svg"},
            {'referenceKey': 'site.line', 'mediaPath': '/local/only.svg'},
            {'referenceKey': '', 'mediaPath': f"{SEEDED_BASE}/logo.svg"},
        ]})
        self.assertEqual(response.status_code, 207)
        self.assertEqual([r['success'] for r in response.get_json()['results']], [True, False, False])

    def test_non_string_media_path_fails_only_that_item(self):
        response = self.post_json('/api/media/update', {'updates': [
            {'referenceKey': 'a.b', 'mediaPath': 5},
            {'referenceKey': 'site.logo', 'mediaPath': f"{SEEDED_BASE}/logo.svg"},
        ]})
        self.assertEqual(response.status_code, 207)
        results = response.get_json()['results']
        self.assertEqual([r['success'] for r in results], [False, True])
        self.assertEqual(results[0]['referenceKey'], 'a.b')

    def test_updates_must_be_a_list(self):
        self.assertEqual(self.post_json('/api/media/update', {'updates': 'nope'}).status_code, 400)

    def test_update_notifies_media_scope(self):
        received = []
        self.app.extensions['content_bus'].on_content_changed('media', received.append)
        self.post_json('/api/media/update', {'updates': [
            {'referenceKey': 'site.logo', 'mediaPath': f"{SEEDED_BASE}/logo.svg"},
        ]})
        self.assertEqual(len(received), 1)

    def test_metadata_update(self):
        with self.app.app_context():
            media_id = Media.find_by_path(f"{SEEDED_BASE}/logo.svg").id
        response = self.put_json(f"/api/media/{media_id}", {'altText': 'Steel Buckle logo', 'filename': 'logo-main.svg'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()['media']['altText'], 'Steel Buckle logo')
        self.assertEqual(self.put_json(f"/api/media/{media_id}", {'filename': '  '}).status_code, 400)
        self.assertEqual(self.put_json('/api/media/999999', {'altText': 'x'}).status_code, 404)


class TestMediaDelete(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.seed()
        self.login()
        with self.app.app_context():
            self.logo_id = Media.find_by_path(f"{SEEDED_BASE}/logo.svg").id

    def test_delete_leaves_references_dangling(self):
        response = self.post_json('/api/media/delete', {'id': self.logo_id})
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.get_json()['remoteDeleted'])
        self.assertEqual(self.media_host.destroyed, ['media/logo'])

        self.assertEqual(self.client.get('/api/media?key=site.logo').status_code, 404)
        with self.app.app_context():
            ref = MediaReference.query.filter_by(reference_key='site.logo').first()
            self.assertIsNotNone(ref)
            self.assertIsNone(ref.media_id)

    def test_remote_failure_still_deletes_locally(self):
        self.media_host.fail_destroy = True
        response = self.post_json('/api/media/delete', {'id': self.logo_id})
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.get_json()['remoteDeleted'])
        with self.app.app_context():
            self.assertIsNone(Media.get_by_id(self.logo_id))

    def test_missing_and_unknown_ids(self):
        self.assertEqual(self.post_json('/api/media/delete', {}).status_code, 400)
        self.assertEqual(self.post_json('/api/media/delete', {'id': 999999}).status_code, 404)


if __name__ == '__main__':
    unittest.main()
