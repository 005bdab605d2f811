"""Tests for tt.core.entries and tt.core.lists: the entry form rules, row mapping and history."""

import unittest
from datetime import datetime, timedelta, timezone

NOW = datetime(2025, 3, 5, 17, 30, 0, tzinfo=timezone.utc)


def make_entry(entry_id="1", client="ACME", task="Dev", duration=3600, username=None):
    from tt.core.entries import TimeEntry
    return TimeEntry(
        id=entry_id,
        client=client,
        task=task,
        description="",
        start=NOW - timedelta(seconds=duration),
        end=NOW,
        duration=duration,
        username=username,
    )


class TestBuildDraft(unittest.TestCase):

    def test_missing_client_or_task_is_rejected(self):
        from tt.core.entries import EntryValidationError, build_draft
        for client, task in (("", "Dev"), ("ACME", ""), ("   ", "Dev"), (None, None)):
            with self.assertRaises(EntryValidationError) as ctx:
                build_draft(client, task, "", 60, now=NOW)
            self.assertEqual(str(ctx.exception), "Please select a client and a task")

    def test_unknown_names_rejected_when_lists_given(self):
        from tt.core.entries import EntryValidationError, build_draft
        with self.assertRaises(EntryValidationError):
            build_draft("Other", "Dev", "", 60, clients=["ACME"], tasks=["Dev"], now=NOW)
        with self.assertRaises(EntryValidationError):
            build_draft("ACME", "Other", "", 60, clients=["ACME"], tasks=["Dev"], now=NOW)

    def test_start_is_backdated_from_now(self):
        from tt.core.entries import build_draft
        draft = build_draft(" ACME ", "Dev", "  fixed the build  ", 5400, now=NOW)
        self.assertEqual(draft.client, "ACME")
        self.assertEqual(draft.description, "fixed the build")
        self.assertEqual(draft.end, NOW)
        self.assertEqual(draft.start, NOW - timedelta(seconds=5400))
        self.assertEqual(draft.duration, 5400)

    def test_explicit_start_time_wins(self):
        from tt.core.entries import build_draft
        start = NOW - timedelta(hours=3)
        draft = build_draft("ACME", "Dev", "", 60, start_time=start, now=NOW)
        self.assertEqual(draft.start, start)
        self.assertEqual(draft.end, NOW)

    def test_zero_duration_is_allowed(self):
        from tt.core.entries import build_draft
        draft = build_draft("ACME", "Dev", "", 0, now=NOW)
        self.assertEqual(draft.duration, 0)
        self.assertEqual(draft.start, NOW)


class TestRowMapping(unittest.TestCase):

    def test_from_row_reads_backend_columns(self):
        from tt.core.entries import TimeEntry
        entry = TimeEntry.from_row({
            "id": 7,
            "cliente": "ACME",
            "tarea": "Dev",
            "descripcion": None,
            "fecha_inicio": "2025-03-05T16:30:00Z",
            "fecha_fin": "2025-03-05T17:30:00+00:00",
            "duracion": 3600,
        }, username="ana")
        self.assertEqual(entry.id, "7")
        self.assertEqual(entry.description, "")
        self.assertEqual(entry.start, NOW - timedelta(hours=1))
        self.assertEqual(entry.end, NOW)
        self.assertEqual(entry.username, "ana")

    def test_from_row_accepts_trimmed_microseconds(self):
        """Postgres drops trailing zeros, so five fraction digits come back."""
        from tt.core.entries import TimeEntry
        entry = TimeEntry.from_row({
            "id": 8,
            "cliente": "ACME",
            "tarea": "Dev",
            "fecha_inicio": "2025-03-05T16:30:00.12345+00:00",
            "fecha_fin": "2025-03-05T17:30:00.5Z",
            "duracion": 3600,
        })
        self.assertEqual(entry.start, NOW - timedelta(hours=1) + timedelta(microseconds=123450))
        self.assertEqual(entry.end, NOW + timedelta(microseconds=500000))

    def test_parse_iso_trims_extra_fraction_digits(self):
        from tt.util import parse_iso
        self.assertEqual(parse_iso("2025-03-05T17:30:00.1234567+00:00"), NOW + timedelta(microseconds=123456))
        self.assertEqual(parse_iso("2025-03-05T17:30:00.123+00:00"), NOW + timedelta(microseconds=123000))

    def test_to_row_and_draft_row(self):
        from tt.core.entries import build_draft, draft_to_row
        entry = make_entry()
        row = entry.to_row(user_id="u1")
        self.assertEqual(row["cliente"], "ACME")
        self.assertEqual(row["tarea"], "Dev")
        self.assertEqual(row["duracion"], 3600)
        self.assertEqual(row["user_id"], "u1")
        self.assertNotIn("user_id", entry.to_row())

        draft = build_draft("ACME", "Dev", "x", 60, now=NOW)
        row = draft_to_row(draft, "u1")
        self.assertEqual(row["fecha_fin"], NOW.isoformat())
        self.assertEqual(row["user_id"], "u1")


class TestHistory(unittest.TestCase):

    def test_summarize(self):
        from tt.core.entries import summarize
        summary = summarize([
            make_entry("1", "ACME", duration=3600),
            make_entry("2", "ACME", duration=1800),
            make_entry("3", "Globex", duration=900),
        ])
        self.assertEqual(summary.count, 3)
        self.assertEqual(summary.total_seconds, 6300)
        self.assertEqual(summary.distinct_clients, 2)
        self.assertEqual(summary.total_display, "1h 45m")

    def test_summarize_empty(self):
        from tt.core.entries import summarize
        summary = summarize([])
        self.assertEqual((summary.count, summary.total_seconds, summary.distinct_clients), (0, 0, 0))

    def test_replace_entry_swaps_by_id_and_stamps_username(self):
        from dataclasses import replace
        from tt.core.entries import replace_entry
        entries = [make_entry("1"), make_entry("2")]
        updated = replace(entries[1], client="Globex")
        result = replace_entry(entries, updated, username="ana")
        self.assertEqual(result[0], entries[0])
        self.assertEqual(result[1].client, "Globex")
        self.assertEqual(result[1].username, "ana")
        self.assertEqual(entries[1].client, "ACME")

    def test_apply_edit_takes_duration_from_hours_field(self):
        from tt.core.entries import apply_edit
        entry = make_entry(duration=3600)
        edited = apply_edit(entry, "Globex", "QA", " notes ", entry.start, entry.end, "1.50")
        self.assertEqual(edited.id, entry.id)
        self.assertEqual(edited.client, "Globex")
        self.assertEqual(edited.description, "notes")
        self.assertEqual(edited.duration, 5400)
        self.assertEqual(edited.end - edited.start, timedelta(hours=1))

    def test_apply_edit_requires_client_and_task(self):
        from tt.core.entries import EntryValidationError, apply_edit
        entry = make_entry()
        with self.assertRaises(EntryValidationError):
            apply_edit(entry, "", "QA", "", entry.start, entry.end, "1.00")


class TestLists(unittest.TestCase):

    def test_normalize_name(self):
        from tt.core.lists import normalize_name
        self.assertEqual(normalize_name("  ACME  "), "ACME")
        self.assertEqual(normalize_name(None), "")

    def test_should_add(self):
        from tt.core.lists import should_add
        self.assertEqual(should_add(" Globex ", ["ACME"]), "Globex")
        self.assertIsNone(should_add("   ", ["ACME"]))
        self.assertIsNone(should_add("ACME", ["ACME"]))
        # Names are compared exactly
        self.assertEqual(should_add("acme", ["ACME"]), "acme")


if __name__ == "__main__":
    unittest.main()
