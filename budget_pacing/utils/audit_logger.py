"""
Audit logging utility.

Logs fetch failures, spend snapshots, pacing records and advisories as JSON
lines so every refresh can be traced after the fact.
"""

import json
import threading
from datetime import datetime, timezone
from typing import Dict, Any, List, Optional
from pathlib import Path


class AuditLogger:
    """
    Log pacing events for the audit trail.

    Maintains a record of:
    - Platform fetch failures (skipped data sources)
    - Spend snapshots per account
    - Pacing records and advisories
    - Completed refreshes and unexpected errors
    """

    def __init__(
        self,
        log_file: str = "audit_log.jsonl",
        log_dir: Optional[str] = None
    ):
        """
        Initialize audit logger.

        Args:
            log_file: Name of log file (JSONL format)
            log_dir: Directory for log files (default: current directory)
        """
        if log_dir:
            self.log_dir = Path(log_dir)
            self.log_dir.mkdir(parents=True, exist_ok=True)
            self.log_path = self.log_dir / log_file
        else:
            self.log_path = Path(log_file)

        # Fetch failures are logged from worker threads
        self._lock = threading.Lock()

    def log_event(self, event: Dict[str, Any]):
        """
        Log a generic event.

        Args:
            event: Event dictionary with arbitrary fields
        """
        if "timestamp" not in event:
            event["timestamp"] = datetime.now(timezone.utc).isoformat()

        with self._lock, open(self.log_path, "a") as f:
            f.write(json.dumps(event, default=str) + "\n")

    def log_fetch_failure(
        self,
        account_id: str,
        platform: str,
        source_account_id: str,
        error_message: str
    ):
        """
        Log a data source that could not be fetched.

        Args:
            account_id: Account whose spend was being aggregated
            platform: Platform of the failing data source
            source_account_id: External account id on that platform
            error_message: Error description
        """
        self.log_event({
            "event_type": "fetch_error",
            "account_id": account_id,
            "platform": platform,
            "source_account_id": source_account_id,
            "error_message": error_message,
        })

    def log_snapshot(self, account_id: str, snapshot):
        """Log the merged spend snapshot of an account."""
        event = {"event_type": "spend_snapshot", "account_id": account_id}
        event.update(snapshot.to_dict())
        self.log_event(event)

    def log_pacing(self, account_id: str, record):
        """Log a computed pacing record."""
        event = {"event_type": "pacing_record", "account_id": account_id}
        event.update(record.to_dict())
        self.log_event(event)

    def log_alert(self, alert):
        """
        Log a pacing advisory.

        Args:
            alert: PacingAlert object
        """
        event = {"event_type": "pacing_alert"}
        event.update(alert.to_dict())
        self.log_event(event)

    def log_refresh(self, generation: int, account_count: int, summary):
        """
        Log a completed portfolio refresh.

        Args:
            generation: Refresh generation number
            account_count: Number of accounts in the portfolio
            summary: PortfolioSummary of the refresh
        """
        event = {
            "event_type": "refresh_completed",
            "generation": generation,
            "account_count": account_count,
        }
        event.update(summary.to_dict())
        self.log_event(event)

    def log_error(
        self,
        error_type: str,
        error_message: str,
        account_id: Optional[str] = None,
        context: Optional[Dict] = None
    ):
        """
        Log an error.

        Args:
            error_type: Type/category of error
            error_message: Error description
            account_id: Optional account identifier
            context: Optional context information
        """
        self.log_event({
            "event_type": "error",
            "error_type": error_type,
            "error_message": error_message,
            "account_id": account_id,
            "context": context or {},
        })

    def get_events(
        self,
        event_type: Optional[str] = None,
        account_id: Optional[str] = None,
        limit: Optional[int] = None
    ) -> List[Dict]:
        """
        Retrieve events from log file.

        Args:
            event_type: Filter by event type
            account_id: Filter by account ID
            limit: Maximum number of events to return

        Returns:
            List of event dictionaries
        """
        if not self.log_path.exists():
            return []

        events = []
        with open(self.log_path, "r") as f:
            for line in f:
                try:
                    event = json.loads(line.strip())
                except json.JSONDecodeError:
                    continue

                if event_type and event.get("event_type") != event_type:
                    continue
                if account_id and event.get("account_id") != account_id:
                    continue

                events.append(event)

                if limit and len(events) >= limit:
                    break

        return events

    def get_summary_stats(self) -> Dict[str, Any]:
        """
        Get summary statistics from audit log.

        Returns:
            Dictionary with event counts by type and alert type
        """
        events = self.get_events()

        event_types = {}
        alerts_by_type = {}

        for event in events:
            event_type = event.get("event_type", "unknown")
            event_types[event_type] = event_types.get(event_type, 0) + 1

            if event_type == "pacing_alert":
                alert_type = event.get("alert_type", "unknown")
                alerts_by_type[alert_type] = alerts_by_type.get(alert_type, 0) + 1

        return {
            "total_events": len(events),
            "event_types": event_types,
            "alerts_by_type": alerts_by_type,
            "log_file": str(self.log_path),
            "log_size_bytes": self.log_path.stat().st_size if self.log_path.exists() else 0
        }

    def clear_log(self):
        """
        Clear the audit log file.

        WARNING: This will delete all audit records.
        """
        if self.log_path.exists():
            self.log_path.unlink()
