"""Tests for front matter assembly."""

import unittest

import yaml

from converters.front_matter import FrontMatterBuilder, format_tag_list
from models import ExtractedMetadata


def make_metadata(**overrides):
    values = dict(
        metadata={'author': 'Ada', 'created': '2020-01-01', 'modified': '2021-02-03'},
        title='Trip Notes',
        description='Days on the coast',
        first_image_path='',
    )
    values.update(overrides)
    return ExtractedMetadata(**values)


class TestFrontMatterBuilder(unittest.TestCase):

    def setUp(self):
        self.builder = FrontMatterBuilder()

    def test_full_document_layout(self):
        """Test the complete front matter layout."""
        extracted = make_metadata(
            metadata={'title': 'Trip Notes', 'author': 'Ada', 'image': 'ignored', 'created': 'c', 'modified': 'm'},
            first_image_path='/images/coast.png',
        )

        document = self.builder.build(extracted, ['travel', 'coast'], 'Body text')

        self.assertEqual(
            document.to_text(),
            '---\n'
            'title: "Trip Notes"\n'
            'description: "Days on the coast"\n'
            'image: "/images/coast.png"\n'
            'tags: ["travel", "coast"]\n'
            'author: Ada\n'
            'created: c\n'
            'modified: m\n'
            '---\n'
            '\n'
            'Body text\n'
        )

    def test_no_image_and_no_tags(self):
        """Test the header without image or tags."""
        document = self.builder.build(make_metadata(), [], 'Body')

        keys = [key for key, _ in document.front_matter]
        self.assertEqual(keys, ['title', 'description', 'tags', 'author', 'created', 'modified'])
        self.assertIn('tags: []', document.header)
        self.assertNotIn('image:', document.header)

    def test_image_meta_kept_when_no_image_found(self):
        """Test that image meta is kept when no lead image was found."""
        extracted = make_metadata(metadata={'image': 'cover.png', 'created': 'c', 'modified': 'm'})

        document = self.builder.build(extracted, [], '')

        self.assertIn(('image', 'cover.png'), document.front_matter)

    def test_reserved_keys_not_repeated(self):
        """Test that reserved keys are not repeated."""
        extracted = make_metadata(metadata={'description': 'dup', 'tags': 'dup', 'created': 'c', 'modified': 'm'})

        document = self.builder.build(extracted, ['a'], '')

        keys = [key for key, _ in document.front_matter]
        self.assertEqual(keys.count('description'), 1)
        self.assertEqual(keys.count('tags'), 1)

    def test_values_are_not_escaped(self):
        """Test that values are written unescaped."""
        document = self.builder.build(make_metadata(title='Say "hi"'), [], '')

        self.assertIn('title: "Say "hi""', document.header)

    def test_header_is_yaml(self):
        """Test that the header parses as YAML."""
        document = self.builder.build(make_metadata(first_image_path='/img/a.png'), ['one', 'two'], 'Body')

        header = document.header.strip('-\n')
        parsed = yaml.safe_load(header)

        self.assertEqual(parsed['title'], 'Trip Notes')
        self.assertEqual(parsed['tags'], ['one', 'two'])
        self.assertEqual(parsed['image'], '/img/a.png')
        self.assertEqual(parsed['author'], 'Ada')

    def test_tags_kept_on_document(self):
        """Test that tags are kept on the rendered document."""
        document = self.builder.build(make_metadata(), ['x', 'y'], '')

        self.assertEqual(document.tags, ('x', 'y'))


class TestFormatTagList(unittest.TestCase):

    def test_format(self):
        """Test timestamp formatting."""
        self.assertEqual(format_tag_list([]), '[]')
        self.assertEqual(format_tag_list(['a']), '["a"]')
        self.assertEqual(format_tag_list(['a', 'b c']), '["a", "b c"]')


if __name__ == '__main__':
    unittest.main()
