"""
AI writing tools.

Text generation happens on the backend; the client picks the endpoint for a
tool from a lookup table and relays the input.
"""

from enum import Enum
from typing import Any, Dict

from . import endpoints
from .client import APIClient


class AITool(str, Enum):
    SUMMARY = "summary"
    EXPERIENCE = "experience"
    SKILLS = "skills"
    EDUCATION = "education"
    COVER_LETTER = "cover_letter"


TOOL_ENDPOINTS: Dict[AITool, str] = {
    AITool.SUMMARY: endpoints.AI_GENERATE_SUMMARY,
    AITool.EXPERIENCE: endpoints.AI_ENHANCE_EXPERIENCE,
    AITool.SKILLS: endpoints.AI_ANALYZE_SKILLS,
    AITool.EDUCATION: endpoints.AI_FORMAT_EDUCATION,
    AITool.COVER_LETTER: endpoints.AI_GENERATE_COVER_LETTER,
}


class AIToolsAPI:

    def __init__(self, client: APIClient):
        self.client = client

    async def generate(self, tool: AITool, input: Any) -> Dict[str, Any]:
        """
        Run one AI tool.

        Args:
            tool: Which tool to run
            input: Tool input, passed through unchanged

        Returns:
            Dict[str, Any]: The backend's response envelope (opaque)
        """
        endpoint = TOOL_ENDPOINTS[AITool(tool)]
        return await self.client.post(endpoint, json_data={"input": input})

    async def generate_summary(self, input: Any) -> Dict[str, Any]:
        return await self.generate(AITool.SUMMARY, input)

    async def enhance_experience(self, input: Any) -> Dict[str, Any]:
        return await self.generate(AITool.EXPERIENCE, input)

    async def analyze_skills(self, input: Any) -> Dict[str, Any]:
        return await self.generate(AITool.SKILLS, input)

    async def format_education(self, input: Any) -> Dict[str, Any]:
        return await self.generate(AITool.EDUCATION, input)

    async def generate_cover_letter(self, input: Any) -> Dict[str, Any]:
        return await self.generate(AITool.COVER_LETTER, input)
