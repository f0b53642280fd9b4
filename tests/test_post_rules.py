"""
blogapi.models.post 단위 테스트

테스트 대상:
- derive_excerpt(): 본문 앞 200자 + '...' 발췌 생성
- parse_tags(): 쉼표 문자열 / 리스트 태그 파싱
- clean_text(): 공백 제거 및 빈 값 처리
- check_post_constraints(), check_category_constraints(): 필드 제약 검증
"""
import pytest

from blogapi.models.post import (
    check_category_constraints,
    check_post_constraints,
    clean_text,
    derive_excerpt,
    parse_tags,
)


class TestDeriveExcerpt:
    """derive_excerpt() 테스트"""

    def test_short_content_used_as_is(self):
        """200자 이하 본문은 그대로 발췌가 됨"""
        assert derive_excerpt('World') == 'World'

    def test_exactly_200_chars_not_truncated(self):
        """정확히 200자는 '...' 없이 유지"""
        content = 'a' * 200
        assert derive_excerpt(content) == content

    def test_long_content_truncated_with_ellipsis(self):
        """200자 초과 본문은 잘리고 '...' 추가"""
        content = 'b' * 199 + 'cdef'
        excerpt = derive_excerpt(content)

        assert excerpt == content[:200] + '...'
        assert len(excerpt) == 203


class TestParseTags:
    """parse_tags() 테스트"""

    def test_comma_separated_string(self):
        """쉼표 문자열: 분리, 공백 제거, 빈 항목 제거, 중복 유지"""
        assert parse_tags('a, b, ,a') == ['a', 'b', 'a']

    def test_list_entries_trimmed(self):
        """리스트 입력은 순서를 유지하며 각 항목 공백 제거"""
        assert parse_tags([' x ', 'y', '  ']) == ['x', 'y']

    def test_missing_tags_use_default(self):
        """None 또는 빈 문자열이면 기본값 사용"""
        assert parse_tags(None) == []
        assert parse_tags('', default=['keep']) == ['keep']
        assert parse_tags(None, default=['keep']) == ['keep']

    def test_empty_list_clears_tags(self):
        """빈 리스트는 명시적인 값으로 취급"""
        assert parse_tags([], default=['old']) == []

    def test_only_separators(self):
        assert parse_tags(' , ,') == []


class TestCleanText:
    """clean_text() 테스트"""

    @pytest.mark.parametrize('value', [None, '', '   ', '\n\t'])
    def test_blank_values_are_none(self, value):
        assert clean_text(value) is None

    def test_value_trimmed(self):
        assert clean_text('  Hello  ') == 'Hello'


class TestConstraints:
    """필드 제약 검증 테스트"""

    def test_valid_post(self):
        assert check_post_constraints('Title', 'Excerpt', 'draft') == []
        assert check_post_constraints('T' * 200, 'E' * 300, 'published') == []

    def test_title_too_long(self):
        errors = check_post_constraints('T' * 201, 'ok', 'draft')
        assert errors == ['Title cannot exceed 200 characters']

    def test_excerpt_too_long(self):
        errors = check_post_constraints('ok', 'E' * 301, 'draft')
        assert errors == ['Excerpt cannot exceed 300 characters']

    def test_invalid_status(self):
        errors = check_post_constraints('ok', 'ok', 'archived')
        assert len(errors) == 1
        assert 'archived' in errors[0]

    def test_multiple_violations_reported(self):
        errors = check_post_constraints('T' * 201, 'E' * 301, 'nope')
        assert len(errors) == 3

    def test_category_constraints(self):
        assert check_category_constraints('News', '') == []
        assert check_category_constraints('N' * 51, '') == ['Category name cannot exceed 50 characters']
        assert check_category_constraints('News', 'D' * 201) == ['Description cannot exceed 200 characters']
