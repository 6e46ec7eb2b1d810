"""Weather lookup, which runs only after a human confirms the call."""

from pydantic import BaseModel, Field

from ...core.logging_config import get_logger
from ..toolset import ConfirmTool

logger = get_logger(__name__)


class WeatherQuery(BaseModel):
    city: str = Field(..., description="City to report the weather for")


get_weather_information = ConfirmTool(
    name="getWeatherInformation",
    description="Show the weather in a given city to the user",
    input_model=WeatherQuery,
)


async def fetch_weather(city: str) -> str:
    logger.info("weather_lookup", city=city)
    return f"The weather in {city} is sunny (placeholder)"
