from django.test import TestCase, override_settings

from apps.examinations.errors import ValidationFailed
from apps.examinations.models import Grade
from apps.examinations.pagination import decode_cursor, encode_cursor, paginate

from .base import SchoolFixturesMixin


class CursorTestCase(TestCase):

    def test_cursor_is_base64_of_the_id(self):
        self.assertEqual(encode_cursor(42), 'NDI=')
        self.assertEqual(decode_cursor('NDI='), 42)

    def test_malformed_cursor(self):
        for cursor in ('not base64!', 'YWJj'):
            with self.subTest(cursor=cursor):
                with self.assertRaises(ValidationFailed):
                    decode_cursor(cursor)


@override_settings(GRAPHQL_DEFAULT_PAGE_SIZE=2, GRAPHQL_MAX_PAGE_SIZE=3)
class PaginateTestCase(SchoolFixturesMixin, TestCase):

    def setUp(self):
        self.grades = [self.make_grade() for _ in range(5)]
        self.queryset = Grade.objects.order_by('pk')

    def test_default_page(self):
        page = paginate(self.queryset)
        self.assertEqual(page.items, self.grades[:2])
        self.assertEqual(page.total_count, 5)
        self.assertTrue(page.has_next_page)
        self.assertFalse(page.has_previous_page)
        self.assertEqual(page.start_cursor, encode_cursor(self.grades[0].pk))

    def test_walk_forward(self):
        first = paginate(self.queryset, first=2)
        second = paginate(self.queryset, first=2, after=first.end_cursor)
        third = paginate(self.queryset, first=2, after=second.end_cursor)

        self.assertEqual(second.items, self.grades[2:4])
        self.assertTrue(second.has_previous_page)
        self.assertEqual(third.items, self.grades[4:])
        self.assertFalse(third.has_next_page)

    def test_walk_backward(self):
        page = paginate(self.queryset, last=2, before=encode_cursor(self.grades[4].pk))
        self.assertEqual(page.items, self.grades[2:4])
        self.assertTrue(page.has_next_page)
        self.assertTrue(page.has_previous_page)

    def test_page_size_is_capped(self):
        page = paginate(self.queryset, first=50)
        self.assertEqual(len(page.items), 3)

    def test_non_positive_page_size(self):
        with self.assertRaises(ValidationFailed):
            paginate(self.queryset, first=0)

    def test_cursor_from_another_collection(self):
        with self.assertRaises(ValidationFailed):
            paginate(self.queryset, after=encode_cursor(999999))

    def test_empty_collection(self):
        page = paginate(Grade.objects.none())
        self.assertEqual(page.items, [])
        self.assertEqual(page.total_count, 0)
        self.assertIsNone(page.start_cursor)
        self.assertIsNone(page.end_cursor)
