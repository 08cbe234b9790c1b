"""
YAML import/export service for rate schedules.

Provides bulk import and export of client rate schedules.
Validation matches model validation (RateSchedule.clean).

YAML Format:
    clients:
      - client: "Jane Smith"
        rate_schedules:
          - name: "Weekday daytime"
            start_date: "2024-01-01"
            end_date: null
            days_covered: ["monday", "tuesday", "wednesday", "thursday", "friday"]
            time_from: "07:00"
            time_until: "19:00"
            charge_type: "hourly_rate"
            base_rate: 22.50
            bank_holiday_multiplier: 1.5
            is_vatable: false
          - name: "Short visits"
            start_date: "2024-01-01"
            days_covered: ["sat", "sun"]
            time_from: "07:00"
            time_until: "22:00"
            charge_type: "flat_rate"
            base_rate: 24.00
            rate_15_minutes: 8.00
            rate_30_minutes: 14.00
"""

import datetime
import logging
from decimal import Decimal, InvalidOperation
from typing import Any

import yaml
from django.core.exceptions import ValidationError
from django.db import transaction

from billing.adapters import rate_schedule_to_dto
from billing.core.applicability import find_overlapping_rates
from billing.core.types import parse_time_of_day
from clients.models import Client
from rates.models import RateSchedule

logger = logging.getLogger(__name__)

RATE_FIELDS = ("rate_15_minutes", "rate_30_minutes", "rate_45_minutes", "rate_60_minutes")


class RateScheduleYAMLExporter:
    """Export rate schedules to YAML format."""

    def __init__(self, schedules_queryset):
        """
        Initialize exporter with rate schedules queryset.

        Args:
            schedules_queryset: Django queryset of RateSchedule objects to export
        """
        self.schedules = schedules_queryset.select_related("client").order_by(
            "client__name", "client_id", "start_date", "id"
        )

    def export_to_yaml(self) -> str:
        """
        Export rate schedules to YAML string, grouped by client.

        Returns:
            YAML string representation of rate schedules
        """

        # Add custom representer for Decimal to preserve precision
        def decimal_representer(dumper, value):
            return dumper.represent_scalar("tag:yaml.org,2002:float", str(value))

        yaml.add_representer(Decimal, decimal_representer)

        clients: list[dict] = []
        by_client: dict[int, dict] = {}
        for schedule in self.schedules:
            if schedule.client_id not in by_client:
                entry = {"client": schedule.client.name, "rate_schedules": []}
                by_client[schedule.client_id] = entry
                clients.append(entry)
            by_client[schedule.client_id]["rate_schedules"].append(
                self._serialize_rate_schedule(schedule)
            )

        data = {"clients": clients}
        return yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)

    def _serialize_rate_schedule(self, schedule: RateSchedule) -> dict:
        """Convert rate schedule instance to dictionary."""
        result = {
            "name": schedule.name,
            "authority_type": schedule.authority_type,
            "rate_category": schedule.rate_category,
            "start_date": schedule.start_date.isoformat(),
            "end_date": schedule.end_date.isoformat() if schedule.end_date else None,
            "is_active": schedule.is_active,
            "days_covered": list(schedule.days_covered),
            "time_from": schedule.time_from.strftime("%H:%M"),
            "time_until": schedule.time_until.strftime("%H:%M"),
            "charge_type": schedule.charge_type,
            "base_rate": schedule.base_rate,
        }

        # Only include tier rates that are set
        for field_name in RATE_FIELDS:
            value = getattr(schedule, field_name)
            if value is not None:
                result[field_name] = value

        result["bank_holiday_multiplier"] = schedule.bank_holiday_multiplier
        result["is_vatable"] = schedule.is_vatable
        return result


class RateScheduleYAMLImporter:
    """Import rate schedules from YAML format with validation."""

    def __init__(self, yaml_content: str, replace_existing: bool = False):
        """
        Initialize importer with YAML content.

        Args:
            yaml_content: YAML string to parse and import
            replace_existing: If True, replace a client's existing rate schedules.
                            If False, skip clients that already have schedules.
        """
        self.yaml_content = yaml_content
        self.replace_existing = replace_existing
        self.results = {
            "created": [],  # [(client, schedule_count), ...]
            "updated": [],  # [(client, schedule_count), ...]
            "skipped": [],  # [(client_name, reason), ...]
            "errors": [],  # [(client_name, error_messages), ...]
            "warnings": [],  # [(client_name, warning_message), ...]
        }

    def import_rate_schedules(self) -> dict:
        """
        Parse and import rate schedules from YAML.

        Returns:
            Dictionary with results:
            {
                'created': [(client, schedule_count), ...],
                'updated': [(client, schedule_count), ...],
                'skipped': [(client_name, reason), ...],
                'errors': [(client_name, error_messages), ...],
                'warnings': [(client_name, warning_message), ...]
            }
        """
        try:
            data = self._parse_yaml()
            self._validate_schema(data)
        except ValueError as e:
            # Parse or schema errors affect entire file
            self.results["errors"].append(("YAML File", [str(e)]))
            return self.results

        # Import each client's schedules in its own transaction
        for client_data in data["clients"]:
            self._import_client_schedules(client_data)

        return self.results

    def _parse_yaml(self) -> dict:
        """Parse YAML content with error handling."""
        try:
            data = yaml.safe_load(self.yaml_content)
            if data is None:
                raise ValueError("Empty YAML file")
            return data
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML syntax: {str(e)}")

    def _validate_schema(self, data: dict):
        """Validate top-level YAML structure."""
        if not isinstance(data, dict):
            raise ValueError("YAML must contain a dictionary at top level")

        if "clients" not in data:
            raise ValueError("Missing required top-level key: clients")

        if not isinstance(data["clients"], list):
            raise ValueError("clients must be a list")

        if len(data["clients"]) == 0:
            raise ValueError("clients list cannot be empty")

    def _import_client_schedules(self, client_data: dict):
        """Import a single client's rate schedules atomically."""
        if not isinstance(client_data, dict) or "client" not in client_data:
            self.results["errors"].append(("Unknown", ["Missing required field: client"]))
            return

        client_name = client_data["client"]
        schedules_data = client_data.get("rate_schedules", [])
        if not isinstance(schedules_data, list) or not schedules_data:
            self.results["errors"].append(
                (client_name, ["rate_schedules must be a non-empty list"])
            )
            return

        # Look up client
        matches = list(Client.objects.filter(name=client_name)[:2])
        if not matches:
            self.results["errors"].append((client_name, [f"Client '{client_name}' not found"]))
            return
        if len(matches) > 1:
            self.results["errors"].append(
                (client_name, [f"Client name '{client_name}' is ambiguous"])
            )
            return
        client = matches[0]

        has_existing = client.rate_schedules.exists()
        if has_existing and not self.replace_existing:
            self.results["skipped"].append(
                (client_name, f"Rate schedules already exist for {client_name}")
            )
            return

        # Import in transaction (per-client atomicity)
        try:
            with transaction.atomic():
                if has_existing:
                    client.rate_schedules.all().delete()
                created = [
                    self._create_rate_schedule(client, schedule_data)
                    for schedule_data in schedules_data
                ]
        except ValidationError as e:
            # Validation errors from model.clean()
            error_messages = []
            if hasattr(e, "error_dict"):
                for field_name, errors in e.error_dict.items():
                    for error in errors:
                        error_messages.extend(f"{field_name}: {message}" for message in error)
            else:
                error_messages = list(e.messages)
            self.results["errors"].append((client_name, error_messages))
            return
        except ValueError as e:
            self.results["errors"].append((client_name, [str(e)]))
            return

        if has_existing:
            self.results["updated"].append((client, len(created)))
        else:
            self.results["created"].append((client, len(created)))

        self._warn_on_overlaps(client_name, created)

    def _warn_on_overlaps(self, client_name: str, schedules: list[RateSchedule]):
        """Record a warning for every pair of imported schedules that overlap."""
        dtos = [rate_schedule_to_dto(schedule) for schedule in schedules]
        names = {
            dto.rate_id: schedule.name or dto.rate_id for dto, schedule in zip(dtos, schedules)
        }
        for first, second in find_overlapping_rates(dtos):
            message = (
                f"Rate schedules '{names[first.rate_id]}' and '{names[second.rate_id]}' "
                f"overlap; '{names[first.rate_id]}' takes precedence"
            )
            logger.warning("%s: %s", client_name, message)
            self.results["warnings"].append((client_name, message))

    def _create_rate_schedule(self, client: Client, schedule_data: dict) -> RateSchedule:
        """Create and validate a rate schedule."""
        if not isinstance(schedule_data, dict):
            raise ValueError("Each rate schedule must be a dictionary")

        for required in ("start_date", "days_covered", "time_from", "time_until", "base_rate"):
            if required not in schedule_data:
                raise ValueError(f"Rate schedule missing required field: {required}")

        schedule = RateSchedule(
            client=client,
            name=schedule_data.get("name", ""),
            authority_type=schedule_data.get("authority_type", client.authority_type),
            rate_category=schedule_data.get("rate_category", "standard"),
            start_date=self._parse_date(schedule_data["start_date"]),
            end_date=self._parse_date(schedule_data.get("end_date")),
            is_active=schedule_data.get("is_active", True),
            days_covered=schedule_data["days_covered"],
            time_from=self._parse_time(schedule_data["time_from"]),
            time_until=self._parse_time(schedule_data["time_until"]),
            charge_type=schedule_data.get("charge_type", "hourly_rate"),
            base_rate=self._parse_decimal(schedule_data["base_rate"], "base_rate"),
            bank_holiday_multiplier=self._parse_decimal(
                schedule_data.get("bank_holiday_multiplier", 1), "bank_holiday_multiplier"
            ),
            is_vatable=schedule_data.get("is_vatable", False),
        )
        for field_name in RATE_FIELDS:
            value = schedule_data.get(field_name)
            if value is not None:
                setattr(schedule, field_name, self._parse_decimal(value, field_name))

        # Validate using model's clean() method
        schedule.full_clean()
        schedule.save()
        return schedule

    def _parse_time(self, value: Any) -> datetime.time:
        """Parse time string in HH:MM or HH:MM:SS format."""
        # YAML 1.1 reads unquoted 19:00 as 1140 and 19:00:00 as 68400
        if isinstance(value, int) and not isinstance(value, bool):
            if value >= 24 * 60:
                hours, seconds = divmod(value, 3600)
                value = f"{hours:02d}:{seconds // 60:02d}:{seconds % 60:02d}"
            else:
                value = f"{value // 60:02d}:{value % 60:02d}"
        return parse_time_of_day(value)

    def _parse_date(self, value: Any) -> datetime.date | None:
        """Parse date string in YYYY-MM-DD format."""
        if value is None or value == "":
            return None
        if isinstance(value, datetime.date):
            return value

        try:
            return datetime.datetime.strptime(value, "%Y-%m-%d").date()
        except (ValueError, TypeError):
            raise ValueError(f"Invalid date format: '{value}'. Expected YYYY-MM-DD or null")

    def _parse_decimal(self, value: Any, field_name: str) -> Decimal:
        """Parse a number, going through str to avoid binary-float artefacts."""
        try:
            return Decimal(str(value))
        except (InvalidOperation, ValueError):
            raise ValueError(f"Invalid number for {field_name}: '{value}'")
