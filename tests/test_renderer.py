"""Tests for template rendering and email decomposition."""

from rules.renderer import apply_replacements, decompose_email, render


class TestRender:
    """Placeholder substitution."""

    def test_fields_are_substituted(self):
        assert render("{{ city }}-{{ year }}", {"city": "NY", "year": "2024"}) == "NY-2024"

    def test_missing_field_renders_empty(self):
        assert render("{{ city }}-{{ year }}", {"city": "NY"}) == "NY-"

    def test_whitespace_inside_braces_is_optional(self):
        assert render("{{city}}/{{  city  }}", {"city": "NY"}) == "NY/NY"

    def test_dotted_names_walk_nested_fields(self):
        assert render("{{ email.domain }}", {"email": {"domain": "example.com"}}) == "example.com"

    def test_nested_group_renders_empty(self):
        assert render("x{{ email }}", {"email": {"domain": "example.com"}}) == "x"

    def test_unescaped_forms_render_the_bare_value(self):
        assert render("{{{ dept }}}-{{& dept }}-{{{dept}}}", {"dept": "Sales"}) == "Sales-Sales-Sales"

    def test_plain_text_is_unchanged(self):
        assert render("Everyone", {}) == "Everyone"

    def test_replacements_run_after_rendering(self):
        assert render("{{ dept }}", {"dept": "R D"}, {" ": "_"}) == "R_D"


class TestReplacements:
    """Literal multi-pattern replacement."""

    def test_replacements_do_not_cascade(self):
        assert apply_replacements("ab", {"a": "b", "b": "c"}) == "bc"

    def test_longest_key_wins(self):
        assert apply_replacements("abc", {"a": "1", "ab": "2"}) == "2c"

    def test_empty_key_is_ignored(self):
        assert apply_replacements("abc", {"": "x"}) == "abc"


class TestDecomposeEmail:
    """Email parts exposed to templates."""

    def test_subdomain_email(self):
        result = decompose_email({"email": "a.b@sub.example.co.uk"})
        assert result["email"]["username"] == "a.b"
        assert result["email"]["domain"] == "sub.example.co.uk"
        assert result["email"]["rootdomain"] == "co.uk"
        assert result["email"]["full"] == "a.b@sub.example.co.uk"

    def test_two_label_domain_is_its_own_root(self):
        result = decompose_email({"email": "jane@example.com"})
        assert result["email"]["rootdomain"] == "example.com"

    def test_value_without_at_sign_is_kept(self):
        assert decompose_email({"email": "n/a"}) == {"email": "n/a"}

    def test_missing_email_is_kept(self):
        assert decompose_email({"city": "NY"}) == {"city": "NY"}
