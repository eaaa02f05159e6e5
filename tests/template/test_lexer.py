"""Тесты лексического анализатора Mustache-шаблонов."""

import pytest

from stache.errors import TemplateSyntaxError
from stache.template.lexer import TemplateLexer, parse_delimiters_pair, tokenize_template
from stache.template.tokens import TokenType


def _types(tokens):
    return [t.type for t in tokens]


def _roundtrip(text: str) -> str:
    return "".join(text[t.raw_start:t.raw_end] for t in tokenize_template(text))


class TestBasicTokens:
    """Базовая токенизация текста и тегов."""

    def test_empty_template(self):
        """Пустой шаблон не даёт ни одного токена."""
        assert TemplateLexer("").tokenize() == []

    def test_plain_text(self):
        """Текст без тегов - один TEXT токен."""
        tokens = TemplateLexer("Hello, world!").tokenize()

        assert len(tokens) == 1
        token = tokens[0]
        assert token.type == TokenType.TEXT
        assert token.value == "Hello, world!"
        assert (token.position, token.end) == (0, 13)
        assert (token.line, token.column) == (1, 1)

    def test_variable_between_text(self):
        tokens = tokenize_template("Hello, {{name}}!")

        assert _types(tokens) == [TokenType.TEXT, TokenType.VARIABLE, TokenType.TEXT]
        assert tokens[0].value == "Hello, "
        assert tokens[1].value == "name"
        assert (tokens[1].position, tokens[1].end) == (7, 15)
        assert tokens[1].column == 8
        assert tokens[2].value == "!"

    def test_all_sigils(self):
        """Тип тега определяется первым символом содержимого."""
        text = "{{#a}}{{^b}}{{/b}}{{/a}}{{>p}}{{!c}}{{&r}}{{{t}}}{{%FILTERS}}"
        tokens = tokenize_template(text)

        assert [(t.type, t.value) for t in tokens] == [
            (TokenType.SECTION_OPEN, "a"),
            (TokenType.INVERTED_OPEN, "b"),
            (TokenType.SECTION_CLOSE, "b"),
            (TokenType.SECTION_CLOSE, "a"),
            (TokenType.PARTIAL, "p"),
            (TokenType.COMMENT, "c"),
            (TokenType.RAW_VARIABLE, "r"),
            (TokenType.RAW_VARIABLE, "t"),
            (TokenType.PRAGMA, "FILTERS"),
        ]

    def test_inheritance_sigils(self):
        tokens = tokenize_template("{{<parent}}{{$block}}{{/block}}{{/parent}}")

        assert _types(tokens) == [
            TokenType.PARENT_OPEN,
            TokenType.BLOCK_OPEN,
            TokenType.SECTION_CLOSE,
            TokenType.SECTION_CLOSE,
        ]

    def test_names_are_trimmed(self):
        tokens = tokenize_template("{{  name  }}{{# section }}{{/ section }}")

        assert [t.value for t in tokens] == ["name", "section", "section"]

    def test_dotted_name_kept_whole(self):
        tokens = tokenize_template("{{a.b.c}}")

        assert tokens[0].value == "a.b.c"

    def test_pragma_value_keeps_params(self):
        tokens = tokenize_template("{{%IMPLICIT-ITERATOR iterator=bob}}")

        assert tokens[0].type == TokenType.PRAGMA
        assert tokens[0].value == "IMPLICIT-ITERATOR iterator=bob"

    def test_line_and_column(self):
        tokens = tokenize_template("a\n  {{x}}")

        variable = tokens[1]
        assert variable.type == TokenType.VARIABLE
        assert (variable.line, variable.column) == (2, 3)


class TestDelimiterChange:
    """Смена разделителей внутри шаблона."""

    def test_change_applies_to_following_text(self):
        tokens = tokenize_template("{{=<% %>=}}<% name %>{{name}}")

        assert _types(tokens) == [TokenType.DELIMITER_CHANGE, TokenType.VARIABLE, TokenType.TEXT]
        assert tokens[0].value == "<% %>"
        assert tokens[1].value == "name"
        assert tokens[2].value == "{{name}}"

    def test_tokens_record_active_delimiters(self):
        tokens = tokenize_template("{{a}}{{=<% %>=}}<%b%>")

        assert tokens[0].delimiters == ("{{", "}}")
        assert tokens[1].delimiters == ("{{", "}}")
        assert tokens[2].delimiters == ("<%", "%>")

    def test_triple_tag_with_custom_delimiters(self):
        tokens = tokenize_template("{{=<% %>=}}<%{x}%>")

        assert tokens[-1].type == TokenType.RAW_VARIABLE
        assert tokens[-1].value == "x"

    def test_initial_delimiters(self):
        tokens = TemplateLexer("[[x]] {{y}}", ("[[", "]]")).tokenize()

        assert _types(tokens) == [TokenType.VARIABLE, TokenType.TEXT]
        assert tokens[1].value == " {{y}}"

    @pytest.mark.parametrize("text", ["{{=<%=}}", "{{= a b c =}}", "{{=<% %>}}", "{{=<= =>=}}"])
    def test_malformed_change(self, text):
        with pytest.raises(TemplateSyntaxError, match="Malformed delimiter change"):
            tokenize_template(text)


class TestSyntaxErrors:
    """Ошибки лексического анализа."""

    def test_unclosed_tag(self):
        with pytest.raises(TemplateSyntaxError, match="Unclosed tag") as exc_info:
            tokenize_template("Hello {{name")

        assert exc_info.value.line == 1
        assert exc_info.value.column == 7
        assert exc_info.value.position == 6

    def test_unclosed_triple_tag(self):
        with pytest.raises(TemplateSyntaxError, match="Unclosed tag"):
            tokenize_template("{{{name}}")

    def test_empty_tag_name(self):
        with pytest.raises(TemplateSyntaxError, match="Empty tag name"):
            tokenize_template("{{}}")

    def test_empty_section_name(self):
        with pytest.raises(TemplateSyntaxError, match="Empty tag name"):
            tokenize_template("{{# }}")

    def test_error_position_on_later_line(self):
        with pytest.raises(TemplateSyntaxError) as exc_info:
            tokenize_template("ok\nstill ok\n  {{oops")

        assert exc_info.value.line == 3
        assert exc_info.value.column == 3
        assert "at 3:3" in str(exc_info.value)


class TestStandalone:
    """Теги, занимающие строку целиком."""

    def test_section_lines_are_standalone(self):
        text = "Begin\n{{#s}}\nInside\n{{/s}}\nEnd\n"
        tokens = tokenize_template(text)

        assert _types(tokens) == [
            TokenType.TEXT,
            TokenType.SECTION_OPEN,
            TokenType.TEXT,
            TokenType.SECTION_CLOSE,
            TokenType.TEXT,
        ]
        opening = tokens[1]
        assert opening.standalone
        assert (opening.raw_start, opening.raw_end) == (6, 13)
        assert tokens[2].value == "Inside\n"
        assert tokens[3].standalone
        assert (tokens[3].raw_start, tokens[3].raw_end) == (20, 27)
        assert tokens[4].value == "End\n"

    def test_indented_comment_line(self):
        tokens = tokenize_template("  {{! comment }}  \nText")

        assert _types(tokens) == [TokenType.COMMENT, TokenType.TEXT]
        assert tokens[0].standalone
        assert tokens[0].indent == "  "
        assert tokens[1].value == "Text"

    def test_variables_are_never_standalone(self):
        tokens = tokenize_template("  {{name}}\n")

        assert _types(tokens) == [TokenType.TEXT, TokenType.VARIABLE, TokenType.TEXT]
        assert not tokens[1].standalone

    def test_crlf_line_endings(self):
        tokens = tokenize_template("{{#a}}\r\nx\r\n{{/a}}\r\n")

        assert _types(tokens) == [TokenType.SECTION_OPEN, TokenType.TEXT, TokenType.SECTION_CLOSE]
        assert tokens[0].raw_end == 8
        assert tokens[1].value == "x\r\n"

    def test_standalone_at_end_without_newline(self):
        text = "x\n  {{! c }}"
        tokens = tokenize_template(text)

        assert _types(tokens) == [TokenType.TEXT, TokenType.COMMENT]
        assert tokens[1].standalone
        assert tokens[1].raw_end == len(text)

    def test_two_tags_on_one_line(self):
        tokens = tokenize_template("{{#a}}{{/a}}\n")

        assert _types(tokens) == [TokenType.SECTION_OPEN, TokenType.SECTION_CLOSE, TokenType.TEXT]
        assert not any(t.standalone for t in tokens)

    def test_text_before_tag_disables_standalone(self):
        tokens = tokenize_template("x {{#a}}\n{{/a}}")

        assert not tokens[1].standalone
        assert tokens[-1].standalone

    def test_partial_keeps_indent(self):
        tokens = tokenize_template("a\n\t {{>p}}\nb")

        partial = tokens[1]
        assert partial.type == TokenType.PARTIAL
        assert partial.standalone
        assert partial.indent == "\t "

    def test_delimiter_change_line_is_standalone(self):
        tokens = tokenize_template("{{=| |=}}\n|x|")

        assert tokens[0].standalone
        assert _types(tokens) == [TokenType.DELIMITER_CHANGE, TokenType.VARIABLE]


class TestRawSpans:
    """Сырые диапазоны токенов покрывают исходный текст без пропусков."""

    @pytest.mark.parametrize("text", [
        "",
        "plain",
        "Hello, {{name}}!",
        "Begin\n{{#s}}\nInside\n{{/s}}\nEnd\n",
        "  {{! c }}  \r\n{{^x}}{{{y}}}{{/x}}",
        "{{=<% %>=}}\n<%#a%>\n  <%>p%>\n<%/a%>",
        "{{<base}}\n  {{$b}}x{{/b}}\n{{/base}}\n",
    ])
    def test_spans_reassemble_source(self, text):
        assert _roundtrip(text) == text

    def test_spans_are_contiguous(self):
        text = "a\n  {{#s}}\n{{x}}\n  {{/s}}  \nb"
        tokens = tokenize_template(text)

        assert tokens[0].raw_start == 0
        for previous, current in zip(tokens, tokens[1:]):
            assert previous.raw_end == current.raw_start
        assert tokens[-1].raw_end == len(text)


class TestDelimitersPair:
    """Проверка пары разделителей из настроек."""

    def test_accepts_string(self):
        assert parse_delimiters_pair("<% %>") == ("<%", "%>")

    def test_accepts_sequence(self):
        assert parse_delimiters_pair(["[[", "]]"]) == ("[[", "]]")

    @pytest.mark.parametrize("value", ["{{", ("{{",), ("", "}}"), ("a", "b", "c")])
    def test_rejects_invalid(self, value):
        with pytest.raises(ValueError):
            parse_delimiters_pair(value)
