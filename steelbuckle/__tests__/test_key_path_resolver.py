"""
Tests for building nested translation trees and resolving dotted key paths.
"""
import os
import sys
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from steelbuckle.utils.content import build_tree, get_nested, resolve_value
from steelbuckle.utils.seed import flatten


class TestBuildTree(unittest.TestCase):

    def test_nests_dotted_paths(self):
        tree = build_tree([
            ('hero.title_start', 'Raudteede'),
            ('hero.cta', 'Võta ühendust'),
            ('nav.about', 'Ettevõttest'),
        ])
        self.assertEqual(tree['hero'], {'title_start': 'Raudteede', 'cta': 'Võta ühendust'})
        self.assertEqual(tree['nav']['about'], 'Ettevõttest')

    def test_leaf_then_subtree_keeps_first_row(self):
        tree = build_tree([('about', 'About'), ('about.title', 'About us')])
        self.assertEqual(tree['about'], 'About')

    def test_subtree_then_leaf_keeps_first_row(self):
        tree = build_tree([('about.title', 'About us'), ('about', 'About')])
        self.assertEqual(tree['about'], {'title': 'About us'})

    def test_duplicate_leaf_keeps_first_value(self):
        tree = build_tree([('a.b', 'first'), ('a.b', 'second')])
        self.assertEqual(tree['a']['b'], 'first')

    def test_empty_paths_are_ignored(self):
        self.assertEqual(build_tree([('', 'x'), ('..', 'y')]), {})


class TestResolveValue(unittest.TestCase):

    def setUp(self):
        self.tree = {'hero': {'title': 'Railway', 'stats': {'years': '35'}}, 'footer': 'Footer'}

    def test_resolves_leaf(self):
        self.assertEqual(resolve_value(self.tree, 'hero.stats.years'), '35')

    def test_missing_key_uses_default(self):
        self.assertEqual(resolve_value(self.tree, 'hero.subtitle', 'Default'), 'Default')

    def test_missing_key_without_default_returns_key_path(self):
        self.assertEqual(resolve_value(self.tree, 'hero.subtitle'), 'hero.subtitle')

    def test_subtree_is_not_a_value(self):
        self.assertEqual(resolve_value(self.tree, 'hero.stats', 'fallback'), 'fallback')

    def test_path_through_a_leaf(self):
        self.assertIsNone(get_nested(self.tree, 'footer.text'))
        self.assertEqual(resolve_value(self.tree, 'footer.text'), 'footer.text')

    def test_none_tree(self):
        self.assertEqual(resolve_value(None, 'hero.title', 'x'), 'x')


class TestFlatten(unittest.TestCase):

    def test_flattens_dicts_and_lists(self):
        rows = dict(flatten({'a': {'b': 'x', 'c': ['p', 'q']}, 'n': 3, 'skip': None}))
        self.assertEqual(rows, {'a.b': 'x', 'a.c.0': 'p', 'a.c.1': 'q', 'n': '3'})

    def test_flatten_then_build_restores_dict_nodes(self):
        content = {'hero': {'title': 'T', 'cta': 'C'}, 'nav': {'about': 'A'}}
        self.assertEqual(build_tree(flatten(content)), content)


if __name__ == '__main__':
    unittest.main()
