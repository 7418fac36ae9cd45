"""Contract for external vision services used by the visual similarity adapter."""

from __future__ import annotations

from typing import Protocol

COMPARE_PROMPT = """I need to compare two pet images to determine if they might be the same animal.

Analyze both images and determine the likelihood that they show the same pet.
Consider factors like:
- Breed characteristics
- Coat color and pattern
- Distinctive markings
- Body shape and size
- Facial features

Return ONLY a similarity score between 0 and 1, where:
0 = Definitely different pets
0.5 = Could be the same pet
1 = Almost certainly the same pet

Just return the number, nothing else."""

DESCRIBE_PROMPT = """Analyze this pet image.

Extract the following information:
1. Most likely breed or breed mix
2. Coat color and pattern
3. Any distinctive features or markings
4. Your confidence level in this assessment (0-1)

Format your response as JSON:
{
  "detectedBreed": "breed name",
  "detectedColor": "color description",
  "distinctiveFeatures": ["feature1", "feature2"],
  "confidence": 0.8
}"""


class VisionService(Protocol):
    """A vision-capable backend answering in free-form text.

    ``compare`` should answer with a bare number between 0 and 1;
    ``describe`` should answer with a JSON object carrying ``detectedBreed``,
    ``detectedColor``, ``distinctiveFeatures`` and ``confidence``. Callers
    must tolerate anything else.
    """

    async def compare(self, image_a: str, image_b: str) -> str:
        """Rate how likely two images show the same animal."""
        ...

    async def describe(self, image: str) -> str:
        """Describe breed, color and markings visible in one image."""
        ...
