"""
Tests for the media host client: public id derivation, request signing and
error mapping (the HTTP session is mocked).
"""
import hashlib
import os
import sys
import unittest
from unittest.mock import Mock

import requests

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from steelbuckle.errors import UpstreamError
from steelbuckle.utils.media_host import MediaHost, public_id_from_url, sign_params


def json_response(status_code, payload):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload
    response.text = str(payload)
    return response


class TestPublicIdFromUrl(unittest.TestCase):

    def test_strips_version_and_extension(self):
        url = 'https://res.cloudinary.com/dxr4omqbd/image/upload/v1744754188/media/logo.svg'
        self.assertEqual(public_id_from_url(url), 'media/logo')

    def test_ignores_query_string(self):
        url = 'https://res.cloudinary.com/x/image/upload/v1/media/Remont_2.jpg?_t=1700000000000'
        self.assertEqual(public_id_from_url(url), 'media/Remont_2')

    def test_without_version_segment(self):
        url = 'https://res.cloudinary.com/x/image/upload/media/projects/valga.png'
        self.assertEqual(public_id_from_url(url), 'media/projects/valga')

    def test_non_hosted_urls(self):
        self.assertIsNone(public_id_from_url('/images/placeholder.jpg'))
        self.assertIsNone(public_id_from_url(''))
        self.assertIsNone(public_id_from_url(None))


class TestSignParams(unittest.TestCase):

    def test_sorted_pairs_plus_secret(self):
        expected = hashlib.sha1(b'folder=media&timestamp=1700000000secret').hexdigest()
        self.assertEqual(sign_params({'timestamp': 1700000000, 'folder': 'media', 'empty': ''}, 'secret'), expected)


class TestMediaHost(unittest.TestCase):

    def setUp(self):
        self.session = Mock()
        self.host = MediaHost('demo', 'key', 'secret', session=self.session)

    def test_upload_returns_host_payload(self):
        self.session.request.return_value = json_response(
            200, {'public_id': 'media/a', 'secure_url': 'https://res.cloudinary.com/demo/image/upload/v1/media/a.png'}
        )
        result = self.host.upload(b'data', 'a.png', 'image/png', folder='media')
        self.assertEqual(result['public_id'], 'media/a')

        method, url = self.session.request.call_args[0]
        self.assertEqual(method, 'POST')
        self.assertTrue(url.endswith('/demo/image/upload'))
        data = self.session.request.call_args[1]['data']
        self.assertEqual(data['folder'], 'media')
        self.assertEqual(data['api_key'], 'key')
        self.assertIn('signature', data)

    def test_upload_error_status_raises(self):
        self.session.request.return_value = json_response(401, {'error': {'message': 'bad key'}})
        with self.assertRaises(UpstreamError):
            self.host.upload(b'data', 'a.png', 'image/png')

    def test_unreachable_host_raises(self):
        self.session.request.side_effect = requests.exceptions.ConnectionError('down')
        with self.assertRaises(UpstreamError):
            self.host.destroy('media/a')

    def test_missing_config_raises(self):
        host = MediaHost(None, None, None, session=self.session)
        self.assertFalse(host.configured)
        with self.assertRaises(UpstreamError):
            host.upload(b'data', 'a.png', 'image/png')
        self.session.request.assert_not_called()

    def test_destroy_reports_result(self):
        self.session.request.return_value = json_response(200, {'result': 'ok'})
        self.assertTrue(self.host.destroy('media/a'))
        self.session.request.return_value = json_response(200, {'result': 'not found'})
        self.assertFalse(self.host.destroy('media/b'))

    def test_list_resources_follows_cursor(self):
        self.session.request.side_effect = [
            json_response(200, {'resources': [{'public_id': 'media/a'}], 'next_cursor': 'c1'}),
            json_response(200, {'resources': [{'public_id': 'media/b'}]}),
        ]
        self.assertEqual(self.host.list_resources('media/'), ['media/a', 'media/b'])
        second_params = self.session.request.call_args_list[1][1]['params']
        self.assertEqual(second_params['next_cursor'], 'c1')


if __name__ == '__main__':
    unittest.main()
