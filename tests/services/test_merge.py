"""Tests for annotation merging across project, component and story layers."""

from __future__ import annotations

from typing import Any

import pytest

from storyprep.domain.annotations import (
    ComponentAnnotations,
    ProjectAnnotations,
    StoryAnnotations,
)
from storyprep.services.merge import (
    MissingRenderError,
    combine_parameters,
    merge_annotations,
    merge_shallow,
    resolve_render,
)


def _render(args: dict[str, Any], context: Any) -> str:
    return "project"


class TestCombineParameters:
    def test_later_layer_wins_scalars(self) -> None:
        assert combine_parameters({"a": 1}, {"a": 2}, {"a": 3}) == {"a": 3}

    def test_nested_mappings_deep_merge(self) -> None:
        result = combine_parameters(
            {"layout": {"padding": 1, "align": "left"}},
            {"layout": {"align": "center"}},
            {"layout": {"background": "dark"}},
        )
        assert result == {"layout": {"padding": 1, "align": "center", "background": "dark"}}

    def test_lists_replace(self) -> None:
        assert combine_parameters({"tags": ["a", "b"]}, {"tags": ["c"]}) == {"tags": ["c"]}

    def test_scalar_replaces_mapping(self) -> None:
        assert combine_parameters({"docs": {"page": 1}}, {"docs": False}) == {"docs": False}

    def test_mapping_replaces_scalar(self) -> None:
        assert combine_parameters({"docs": False}, {"docs": {"page": 1}}) == {"docs": {"page": 1}}

    def test_none_layers_skipped(self) -> None:
        assert combine_parameters(None, {"a": 1}, None) == {"a": 1}

    def test_inputs_not_mutated(self) -> None:
        base = {"layout": {"padding": 1}}
        override = {"layout": {"align": "center"}}
        result = combine_parameters(base, override)
        result["layout"]["padding"] = 99
        assert base == {"layout": {"padding": 1}}
        assert override == {"layout": {"align": "center"}}


class TestMergeShallow:
    def test_whole_values_replaced(self) -> None:
        assert merge_shallow({"a": {"x": 1}}, {"a": {"y": 2}}) == {"a": {"y": 2}}

    def test_empty_layers(self) -> None:
        assert merge_shallow({}, None, {"a": 1}) == {"a": 1}


class TestResolveRender:
    def test_story_beats_component_and_project(self) -> None:
        story_render = lambda args, ctx: "story"  # noqa: E731
        component_render = lambda args, ctx: "component"  # noqa: E731
        render = resolve_render(
            "a--b",
            StoryAnnotations(name="B", render=story_render),
            ComponentAnnotations(title="A", render=component_render),
            ProjectAnnotations(render=_render),
        )
        assert render is story_render

    def test_user_story_fn_beats_render(self) -> None:
        legacy = lambda ctx: "legacy"  # noqa: E731
        render = resolve_render(
            "a--b",
            StoryAnnotations(name="B", user_story_fn=legacy, render=_render),
            ComponentAnnotations(title="A"),
            ProjectAnnotations(),
        )
        assert render is legacy

    def test_falls_back_to_project(self) -> None:
        render = resolve_render(
            "a--b",
            StoryAnnotations(name="B"),
            ComponentAnnotations(title="A"),
            ProjectAnnotations(render=_render),
        )
        assert render is _render

    def test_missing_everywhere_raises_with_story_id(self) -> None:
        with pytest.raises(MissingRenderError, match="components-button--primary") as exc_info:
            resolve_render(
                "components-button--primary",
                StoryAnnotations(name="Primary"),
                ComponentAnnotations(title="Components/Button"),
                ProjectAnnotations(),
            )
        assert exc_info.value.story_id == "components-button--primary"


class TestMergeAnnotations:
    def _layers(self) -> tuple[StoryAnnotations, ComponentAnnotations, ProjectAnnotations]:
        def d_story(fn: Any, ctx: Any) -> Any:
            return fn()

        def d_component(fn: Any, ctx: Any) -> Any:
            return fn()

        def d_project(fn: Any, ctx: Any) -> Any:
            return fn()

        def l_project(ctx: Any) -> dict[str, Any]:
            return {}

        def l_component(ctx: Any) -> dict[str, Any]:
            return {}

        def l_story(ctx: Any) -> dict[str, Any]:
            return {}

        project = ProjectAnnotations(
            render=_render,
            parameters={"shared": "project", "layout": {"padding": 1}},
            args={"shared": "project", "p": 1},
            arg_types={"shared": {"control": "text", "description": "project"}},
            decorators=(d_project,),
            loaders=(l_project,),
        )
        component = ComponentAnnotations(
            title="Components/Button",
            parameters={"shared": "component", "layout": {"align": "center"}},
            args={"shared": "component", "c": 2},
            arg_types={"shared": {"control": "select"}},
            decorators=(d_component,),
            loaders=(l_component,),
        )
        story = StoryAnnotations(
            name="Primary",
            parameters={"shared": "story"},
            args={"shared": "story", "s": 3},
            arg_types={"shared": {"control": "radio"}},
            decorators=(d_story,),
            loaders=(l_story,),
        )
        return story, component, project

    def test_story_layer_wins_for_shared_keys(self) -> None:
        story, component, project = self._layers()
        merged = merge_annotations("components-button--primary", story, component, project)
        assert merged.parameters["shared"] == "story"
        assert merged.args["shared"] == "story"
        assert merged.arg_types["shared"] == {"control": "radio"}

    def test_unshared_keys_preserved(self) -> None:
        story, component, project = self._layers()
        merged = merge_annotations("components-button--primary", story, component, project)
        assert merged.args == {"shared": "story", "p": 1, "c": 2, "s": 3}
        assert merged.parameters["layout"] == {"padding": 1, "align": "center"}

    def test_decorators_story_first(self) -> None:
        story, component, project = self._layers()
        merged = merge_annotations("components-button--primary", story, component, project)
        assert merged.decorators == (
            story.decorators[0],
            component.decorators[0],
            project.decorators[0],
        )

    def test_loaders_project_first(self) -> None:
        story, component, project = self._layers()
        merged = merge_annotations("components-button--primary", story, component, project)
        assert merged.loaders == (
            project.loaders[0],
            component.loaders[0],
            story.loaders[0],
        )
