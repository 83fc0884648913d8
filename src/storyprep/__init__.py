"""storyprep — resolve layered story annotations into render-ready descriptors."""

from storyprep.domain.annotations import (
    ComponentAnnotations,
    ProjectAnnotations,
    StoryAnnotations,
)
from storyprep.domain.context import EnhancerContext, StoryContext
from storyprep.domain.story import PreparedStory
from storyprep.services.merge import MissingRenderError
from storyprep.services.prepare import prepare_story

__version__ = "0.1.0"

__all__ = [
    "ComponentAnnotations",
    "EnhancerContext",
    "MissingRenderError",
    "PreparedStory",
    "ProjectAnnotations",
    "StoryAnnotations",
    "StoryContext",
    "prepare_story",
]
