"""
Tests for character sessions: sheet values, alignment grid, direct edits,
navigation, and the session registry.
"""

import pytest

from app.core.errors import GenerationInProgress, SessionNotFound, UnknownField
from app.models.fields import Alignment, BioField, toggle_alignment
from app.models.history import VisualState
from app.models.session import BIO_OPERATION, IMAGE_OPERATION, CharacterSession, SessionRegistry
from app.services.prompts import build_bio_request, build_portrait_prompt


class TestAlignment:
    def test_toggle(self):
        assert toggle_alignment("", Alignment.LAWFUL_GOOD) is Alignment.LAWFUL_GOOD
        assert toggle_alignment("Lawful Good", Alignment.LAWFUL_GOOD) is None
        assert toggle_alignment("Lawful Good", Alignment.CHAOTIC_EVIL) is Alignment.CHAOTIC_EVIL

    def test_session_grid_click(self, session):
        assert session.select_alignment("True Neutral") == "True Neutral"
        assert session.select_alignment(Alignment.NEUTRAL_GOOD) == "Neutral Good"
        assert session.select_alignment(Alignment.NEUTRAL_GOOD) == ""
        assert session.sheet["alignment"] == ""

    def test_grid_has_nine_tiles(self):
        assert len(Alignment) == 9


class TestFormValues:
    def test_fresh_session(self, session):
        assert session.id.startswith("sess_")
        assert all(v == "" for v in session.form_data().values())
        assert all(s is VisualState.NEUTRAL for s in session.visual.values())
        assert session.portrait is None
        assert session.bio_generated is False

    def test_update_sheet(self, session):
        session.update_sheet({"characterName": "Dalinar", "level": 1, "sex": None})
        assert session.sheet["characterName"] == "Dalinar"
        assert session.sheet["level"] == "1"
        assert session.sheet["sex"] == ""

    def test_update_sheet_rejects_unknown_keys(self, session):
        with pytest.raises(UnknownField):
            session.update_sheet({"characterName": "Dalinar", "shardblade": "Oathbringer"})
        assert session.sheet["characterName"] == ""

    def test_edit_field_sets_neutral_without_version(self, session):
        session.visual[BioField.DIET] = VisualState.HIGHLIGHTED
        assert session.edit_field("diet", "Chouta") is VisualState.NEUTRAL
        assert session.bio[BioField.DIET] == "Chouta"
        assert session.history.length(BioField.DIET) == 0

    def test_edit_unknown_field(self, session):
        with pytest.raises(UnknownField):
            session.edit_field("nickname", "Kal")

    def test_form_data_uses_wire_keys(self, session):
        session.edit_field(BioField.LANGUAGE_QUIRKS, "Clipped vowels")
        assert session.form_data()["languageQuirks"] == "Clipped vowels"


class TestNavigate:
    def test_no_history_is_no_op(self, session):
        session.edit_field(BioField.DIET, "Chouta")
        assert session.navigate(BioField.DIET, "previous") is None
        assert session.bio[BioField.DIET] == "Chouta"

    def test_round_trip_restores_states(self, session):
        session.history.record_generation(BioField.DIET, "Chouta", "Curried lavis")
        session.bio[BioField.DIET] = "Curried lavis"
        session.visual[BioField.DIET] = VisualState.HIGHLIGHTED

        session.navigate(BioField.DIET, "previous")
        assert (session.bio[BioField.DIET], session.visual[BioField.DIET]) == ("Chouta", VisualState.NEUTRAL)
        session.navigate(BioField.DIET, "next")
        assert (session.bio[BioField.DIET], session.visual[BioField.DIET]) == ("Curried lavis", VisualState.HIGHLIGHTED)

    def test_bad_direction(self, session):
        with pytest.raises(ValueError):
            session.navigate(BioField.DIET, "sideways")


class TestLatches:
    def test_latch_refuses_second_holder_and_releases(self, session):
        with session.latch(BIO_OPERATION):
            assert session.is_busy(BIO_OPERATION)
            assert not session.is_busy(IMAGE_OPERATION)
            with pytest.raises(GenerationInProgress):
                with session.latch(BIO_OPERATION):
                    pass
        assert not session.is_busy(BIO_OPERATION)

    def test_latch_released_on_error(self, session):
        with pytest.raises(RuntimeError):
            with session.latch(IMAGE_OPERATION):
                raise RuntimeError("boom")
        assert not session.is_busy(IMAGE_OPERATION)


class TestRegistry:
    def test_create_get_delete(self):
        registry = SessionRegistry()
        session = registry.create()
        assert registry.get(session.id) is session
        assert len(registry) == 1

        registry.delete(session.id)
        assert len(registry) == 0
        with pytest.raises(SessionNotFound):
            registry.get(session.id)

    def test_sessions_are_isolated(self):
        registry = SessionRegistry()
        a, b = registry.create(), registry.create()
        a.edit_field(BioField.DIET, "Chouta")
        assert b.bio[BioField.DIET] == ""


class TestPrompts:
    def test_bio_request_defaults(self):
        prompt = build_bio_request(CharacterSession().form_data())
        assert "Player Name: Not specified" in prompt
        assert "Conditions & Injuries: None specified" in prompt
        assert "- Won't Do: Create moral boundaries based on background" in prompt

    def test_bio_request_includes_existing_values(self):
        session = CharacterSession()
        session.update_sheet({"ancestry": "Thaylen", "alignment": "Lawful Neutral"})
        session.edit_field(BioField.DIET, "Only fish")
        prompt = build_bio_request(session.form_data())
        assert "Ancestry: Thaylen" in prompt
        assert "Alignment: Lawful Neutral" in prompt
        assert "- Diet: Only fish" in prompt

    def test_portrait_prompt_defaults(self):
        prompt = build_portrait_prompt({})
        assert "portrait of a character" in prompt
        assert "with neutral features" in prompt
