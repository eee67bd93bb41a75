from __future__ import annotations

import itertools
import json
import os
import unittest
from unittest import mock

from detzip import verifier
from detzip.assembler import assemble
from detzip.codec import Deflate, Store
from detzip.crc import fingerprint
from detzip.dostime import ArchiveTimestamp
from detzip.errors import Divergence
from detzip.records import InputEntry
from detzip.reference import assemble_reference
from detzip.verifier import STATUS_MATCH, STATUS_STRUCTURAL_MATCH, verify


TS_1986 = ArchiveTimestamp(1986, 1, 1, 3, 0, 0)


def _sample_entries():
    return [
        InputEntry("docs/a.txt", b"hello world\n" * 50),
        InputEntry("docs/b.bin", os.urandom(2048)),
        InputEntry("docs/café.md", "# Tïtle\n".encode("utf-8") * 10),
        InputEntry("empty.txt", b""),
        InputEntry("index.ts", b"export const answer = 42;\n" * 20),
    ]


class ReferenceEncoderTests(unittest.TestCase):
    def test_store_is_byte_identical_to_native(self):
        entries = _sample_entries()
        self.assertEqual(assemble_reference(entries, TS_1986, Store()), assemble(entries, TS_1986, Store()))

    def test_empty_store_identical(self):
        self.assertEqual(assemble_reference([], TS_1986, Store()), assemble([], TS_1986, Store()))


class VerifyTests(unittest.TestCase):
    def test_native_store_and_deflate(self):
        entries = _sample_entries()
        report = verify(entries, TS_1986, [Store(), Deflate()])
        self.assertEqual([r.name for r in report.records], ["native-store", "native-deflate"])
        store = report.by_name("native-store")
        self.assertEqual(store.status, STATUS_MATCH)
        self.assertEqual(store.fingerprint, fingerprint(assemble(entries, TS_1986, Store())))
        self.assertEqual(report.by_name("native-deflate").status, STATUS_STRUCTURAL_MATCH)

    def test_both_backends(self):
        entries = _sample_entries()
        report = verify(entries, TS_1986, {Store(), Deflate()}, backends=("native", "zipfile"), runs=3)
        self.assertEqual(len(report.records), 4)
        stores = [r for r in report.records if r.strategy == "store"]
        self.assertEqual({r.fingerprint for r in stores}, {stores[0].fingerprint})
        self.assertTrue(all(r.status == STATUS_MATCH for r in stores))
        deflates = [r for r in report.records if r.strategy == "deflate"]
        self.assertTrue(all(r.status == STATUS_STRUCTURAL_MATCH for r in deflates))

    def test_scenario_fingerprint_md5(self):
        entries = [InputEntry("a.txt", b"AAA"), InputEntry("b.txt", b"BB")]
        report = verify(entries, TS_1986, [Store()], algorithm="md5")
        rec = report.records[0]
        self.assertEqual(rec.byte_length, 199)
        self.assertEqual(len(rec.fingerprint), 32)

    def test_sink_receives_artifacts(self):
        seen = []
        verify(_sample_entries(), TS_1986, [Store(), Deflate()], backends=["native", "zipfile"], sink=seen.append, prefix="result_1986")
        self.assertEqual(
            [a.name for a in seen],
            [
                "result_1986_native_store.zip",
                "result_1986_native_deflate.zip",
                "result_1986_zipfile_store.zip",
                "result_1986_zipfile_deflate.zip",
            ],
        )
        self.assertTrue(all(a.data.startswith(b"PK\x03\x04") for a in seen))

    def test_deflate_levels_are_distinct_targets(self):
        entries = [InputEntry("a.txt", b"hello " * 100)]
        seen = []
        report = verify(entries, TS_1986, [Deflate(1), Deflate(), Deflate(9)], sink=seen.append)
        self.assertEqual(
            [r.name for r in report.records],
            ["native-deflate-1", "native-deflate", "native-deflate-9"],
        )
        self.assertEqual(report.by_name("native-deflate-9").strategy, "deflate")
        self.assertEqual(
            [a.name for a in seen],
            ["result_native_deflate-1.zip", "result_native_deflate.zip", "result_native_deflate-9.zip"],
        )

    def test_report_rendering(self):
        report = verify(_sample_entries(), TS_1986, [Store()])
        doc = json.loads(json.dumps(report.to_dict()))
        self.assertEqual(doc["algorithm"], "sha256")
        self.assertEqual(doc["records"][0]["status"], "match")
        line = report.format_lines()[0]
        self.assertTrue(line.startswith("native-store\tmatch\t"))
        self.assertIn("sha256:", line)

    def test_nondeterministic_backend_diverges(self):
        counter = itertools.count()

        def flaky(entries, timestamp, strategy):
            return assemble(entries, timestamp, strategy, comment=b"%d" % next(counter))

        with mock.patch.dict(verifier.BACKENDS, {"flaky": flaky}):
            with self.assertRaises(Divergence) as ctx:
                verify(_sample_entries(), TS_1986, [Store()], backends=["flaky"])
        self.assertEqual(ctx.exception.strategy_a, "flaky-store")
        self.assertEqual(ctx.exception.strategy_b, "flaky-store")

    def test_store_backends_disagree(self):
        def commented(entries, timestamp, strategy):
            return assemble(entries, timestamp, strategy, comment=b"x")

        with mock.patch.dict(verifier.BACKENDS, {"commented": commented}):
            with self.assertRaises(Divergence) as ctx:
                verify(_sample_entries(), TS_1986, [Store()], backends=["native", "commented"])
        self.assertEqual((ctx.exception.strategy_a, ctx.exception.strategy_b), ("native-store", "commented-store"))

    def test_deflate_fingerprints_may_differ(self):
        def commented(entries, timestamp, strategy):
            return assemble(entries, timestamp, strategy, comment=b"x")

        with mock.patch.dict(verifier.BACKENDS, {"commented": commented}):
            report = verify(_sample_entries(), TS_1986, [Deflate()], backends=["native", "commented"])
        fps = {r.fingerprint for r in report.records}
        self.assertEqual(len(fps), 2)

    def test_wrong_content_diverges(self):
        def lossy(entries, timestamp, strategy):
            changed = [InputEntry(e.path, e.content[:-1]) for e in entries]
            return assemble(changed, timestamp, strategy)

        with mock.patch.dict(verifier.BACKENDS, {"lossy": lossy}):
            with self.assertRaises(Divergence) as ctx:
                verify(_sample_entries(), TS_1986, [Deflate()], backends=["lossy"])
        self.assertEqual(ctx.exception.strategy_b, "input")

    def test_reordered_output_diverges(self):
        def shuffled(entries, timestamp, strategy):
            return assemble(list(reversed(entries)), timestamp, strategy)

        with mock.patch.dict(verifier.BACKENDS, {"shuffled": shuffled}):
            with self.assertRaises(Divergence):
                verify(_sample_entries(), TS_1986, [Store()], backends=["shuffled"])

    def test_corrupt_output_diverges(self):
        def corrupt(entries, timestamp, strategy):
            return b"not a zip"

        with mock.patch.dict(verifier.BACKENDS, {"corrupt": corrupt}):
            with self.assertRaises(Divergence):
                verify(_sample_entries(), TS_1986, [Store()], backends=["corrupt"])

    def test_argument_errors(self):
        with self.assertRaises(ValueError):
            verify(_sample_entries(), TS_1986, [Store()], runs=0)
        with self.assertRaises(ValueError):
            verify(_sample_entries(), TS_1986, [])
        with self.assertRaises(ValueError):
            verify(_sample_entries(), TS_1986, [Store()], backends=["jszip"])
        with self.assertRaises(ValueError):
            verify(_sample_entries(), TS_1986, [Store()], algorithm="crc32")


if __name__ == "__main__":
    unittest.main()
