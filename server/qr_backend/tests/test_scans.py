import unittest

from qr_backend.db import InMemoryDbClient
from qr_backend.scans import attach_location, record_visit


class ScanRecordingTest(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()
        campaign = self.db.create_campaign(
            owner="user-1",
            name="spring-sale",
            url="https://example.com",
            pdf_key="pdfs/original.pdf",
            pdf_url="https://bucket/pdfs/original.pdf",
            flyers=2,
        )
        self.flyer = self.db.create_flyer(
            campaign_id=campaign.id,
            number=1,
            campaign_name=campaign.name,
            redirect_url=campaign.url,
        )
        self.other = self.db.create_flyer(
            campaign_id=campaign.id,
            number=2,
            campaign_name=campaign.name,
            redirect_url=campaign.url,
        )

    def test_only_first_scan_needs_location(self):
        first = record_visit(self.db, self.flyer)
        second = record_visit(self.db, self.db.get_flyer(self.flyer.id))

        self.assertTrue(first.needs_location)
        self.assertFalse(second.needs_location)
        self.assertEqual((second.flyer_scans, second.campaign_scans), (2, 2))

    def test_counters_follow_scan_table(self):
        record_visit(self.db, self.flyer)
        # A stale counter is corrected on the next scan.
        self.db.flyers[self.flyer.id].scans = 40
        outcome = record_visit(self.db, self.flyer)

        self.assertEqual(outcome.flyer_scans, 2)
        self.assertEqual(self.db.get_flyer(self.flyer.id).scans, 2)

    def test_attach_location_uses_given_scan(self):
        first = record_visit(self.db, self.flyer).scan
        record_visit(self.db, self.flyer)

        scan = attach_location(self.db, self.flyer, 1.0, 2.0, scan_id=first.id)

        self.assertEqual(scan.id, first.id)
        self.assertEqual((scan.lat, scan.long), (1.0, 2.0))
        self.assertTrue(self.db.get_flyer(self.flyer.id).has_location)
        self.assertEqual(self.db.count_scans(flyer_id=self.flyer.id), 2)

    def test_posted_at_is_set_by_first_location_only(self):
        attach_location(self.db, self.flyer, 1.0, 2.0)
        posted_at = self.db.get_flyer(self.flyer.id).posted_at
        self.assertIsNotNone(posted_at)

        attach_location(self.db, self.db.get_flyer(self.flyer.id), 3.0, 4.0)
        moved = self.db.get_flyer(self.flyer.id)
        self.assertEqual(moved.posted_at, posted_at)
        self.assertEqual((moved.lat, moved.long), (3.0, 4.0))

    def test_attach_location_ignores_foreign_scan_id(self):
        foreign = record_visit(self.db, self.other).scan
        own = record_visit(self.db, self.flyer).scan

        scan = attach_location(self.db, self.flyer, 1.0, 2.0, scan_id=foreign.id)

        self.assertEqual(scan.id, own.id)
        self.assertIsNone(self.db.get_scan(foreign.id).lat)

    def test_attach_location_without_scans(self):
        self.assertIsNone(attach_location(self.db, self.flyer, 1.0, 2.0))
        self.assertTrue(self.db.get_flyer(self.flyer.id).has_location)


if __name__ == "__main__":
    unittest.main()
