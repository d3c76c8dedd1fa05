from collections.abc import Sequence

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from tablebook.app.domain.models import GlobalSettings, TableConfiguration


SETTING_KEYS = ("max_party_size", "slot_duration", "advance_booking_days")

SETTING_DESCRIPTIONS = {
    "max_party_size": "Maximum party size allowed",
    "slot_duration": "Reservation slot duration in minutes",
    "advance_booking_days": "How many days in advance customers can book",
}


async def fetch_table_configurations(session: AsyncSession) -> list[TableConfiguration]:
    result = await session.execute(
        text(
            """
            SELECT party_size, table_count, max_reservations_per_slot, is_active
            FROM table_configurations
            ORDER BY party_size
            """
        )
    )
    return [TableConfiguration.model_validate(dict(row)) for row in result.mappings().all()]


async def fetch_global_settings(session: AsyncSession) -> GlobalSettings:
    """Stored key/value settings over the model defaults."""
    result = await session.execute(
        text(
            """
            SELECT setting_key, setting_value
            FROM restaurant_settings
            WHERE setting_key = ANY(:keys)
            """
        ),
        {"keys": list(SETTING_KEYS)},
    )
    values = {row.setting_key: int(row.setting_value) for row in result}
    return GlobalSettings(**values)


async def save_table_configuration(
    session: AsyncSession,
    configs: Sequence[TableConfiguration],
    global_settings: GlobalSettings,
) -> None:
    """Replace the configuration set and upsert the global settings in one transaction."""
    async with session.begin():
        await session.execute(text("DELETE FROM table_configurations"))
        if configs:
            await session.execute(
                text(
                    """
                    INSERT INTO table_configurations (
                      party_size, table_count, max_reservations_per_slot, is_active
                    ) VALUES (
                      :party_size, :table_count, :max_reservations_per_slot, :is_active
                    )
                    """
                ),
                [config.model_dump() for config in configs],
            )

        for key in SETTING_KEYS:
            await session.execute(
                text(
                    """
                    INSERT INTO restaurant_settings (setting_key, setting_value, description)
                    VALUES (:key, :value, :description)
                    ON CONFLICT (setting_key)
                    DO UPDATE SET setting_value = EXCLUDED.setting_value, updated_at = NOW()
                    """
                ),
                {
                    "key": key,
                    "value": str(getattr(global_settings, key)),
                    "description": SETTING_DESCRIPTIONS[key],
                },
            )
