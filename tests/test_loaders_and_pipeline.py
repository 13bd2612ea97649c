import contextlib
import io
import json
from pathlib import Path
import tempfile
import unittest

import matplotlib
matplotlib.use("Agg")
import pandas as pd

from uspto_DatasetsCatalog.core.grouping import build_index
from uspto_DatasetsCatalog.core.pipeline import dataset_dirname, run_catalog
from uspto_DatasetsCatalog.core.plotting import save_availability_plot, yearly_format_counts
from uspto_DatasetsCatalog.core.reports import availability_frame, catalog_frame
from uspto_DatasetsCatalog.loaders import manifest_loader
from uspto_DatasetsCatalog.loaders.manifest_loader import ManifestError
from uspto_DatasetsCatalog.main import main
from uspto_DatasetsCatalog.utils.detect import discover_inputs

CLAIMS = "patent-claims-research-dataset"
EXAM = "patent-examination-research-dataset-public-pair"

RECORDS = [
    {"path": f"{CLAIMS}/x", "table_name": "Claims Summary 2019 DTA", "shareable_link": "L1"},
    {"path": f"{CLAIMS}/x", "table_name": "Claims Summary 2020 CSV", "shareable_link": "L2"},
    {"path": f"{CLAIMS}/x", "table_name": "Claims Summary 2020 DTA", "shareable_link": "L3"},
    {"path": f"{CLAIMS}/y", "table_name": "document_stats 2019 CSV", "shareable_link": "L4"},
    {"path": f"{EXAM}/z", "table_name": "application data 2018 DTA", "shareable_link": "E1"},
]


class ManifestLoaderTests(unittest.TestCase):
    def test_json_array_manifest(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            p = Path(tmpdir) / "uspto_links.json"
            p.write_text(json.dumps(RECORDS + ["not-a-record"]), encoding="utf-8")
            records = manifest_loader.load(p)
        self.assertEqual(RECORDS, records)

    def test_wrapped_json_manifest(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            p = Path(tmpdir) / "links.json"
            p.write_text(json.dumps({"files": RECORDS[:2]}), encoding="utf-8")
            self.assertEqual(RECORDS[:2], manifest_loader.load(p))

    def test_csv_manifest_maps_blanks_to_none(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            p = Path(tmpdir) / "links.csv"
            p.write_text(
                "path,table_name,shareable_link\n"
                f"{CLAIMS}/x,Claims Summary 2019 DTA,L1\n"
                f"{CLAIMS}/x,Claims Summary 2020 CSV,\n",
                encoding="utf-8",
            )
            records = manifest_loader.load(p)
        self.assertEqual(2, len(records))
        self.assertEqual("L1", records[0]["shareable_link"])
        self.assertIsNone(records[1]["shareable_link"])
        self.assertEqual("Claims Summary 2020 CSV", records[1]["table_name"])

    def test_invalid_manifests_raise(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            bad_json = Path(tmpdir) / "bad.json"
            bad_json.write_text("[{", encoding="utf-8")
            scalar = Path(tmpdir) / "scalar.json"
            scalar.write_text("42", encoding="utf-8")
            other = Path(tmpdir) / "links.txt"
            other.write_text("x", encoding="utf-8")
            for p in (bad_json, scalar, other, Path(tmpdir) / "missing.json"):
                with self.assertRaises(ManifestError):
                    manifest_loader.load(p)

    def test_discover_inputs_picks_manifests_only(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            (root / "sub").mkdir()
            (root / "uspto_links.json").write_text(json.dumps(RECORDS), encoding="utf-8")
            (root / "sub" / "more.csv").write_text("path,table_name,shareable_link\n", encoding="utf-8")
            (root / "sub" / "unrelated.csv").write_text("a,b\n1,2\n", encoding="utf-8")
            (root / "notes.txt").write_text("hello", encoding="utf-8")

            found = discover_inputs(root)
            self.assertEqual([("csv", "more.csv"), ("json", "uspto_links.json")],
                             [(d.kind, d.path.name) for d in found])
            self.assertEqual(["uspto_links.json"], [d.path.name for d in discover_inputs(root, recurse=False)])
            self.assertEqual([], discover_inputs(root / "does-not-exist"))


class CatalogReportTests(unittest.TestCase):
    def test_catalog_frame_has_one_row_per_record(self):
        index = build_index(RECORDS)
        df = catalog_frame(index)
        self.assertEqual(len(RECORDS), len(df))
        self.assertEqual({"Claims Summary", "Document Stats", "Application Data"}, set(df["table_display"]))
        self.assertEqual(["Patent Claims Research Dataset"], df.loc[df["dataset"] == CLAIMS, "dataset_name"].unique().tolist())
        self.assertEqual(1, len(catalog_frame(index, EXAM)))

    def test_availability_matrix(self):
        index = build_index(RECORDS)
        df = availability_frame(index, CLAIMS)
        self.assertEqual(["table", "2020", "2019"], list(df.columns))
        rows = df.set_index("table")
        self.assertEqual("DTA+CSV", rows.loc["Claims Summary", "2020"])
        self.assertEqual("DTA", rows.loc["Claims Summary", "2019"])
        self.assertEqual("", rows.loc["Document Stats", "2020"])
        self.assertEqual("CSV", rows.loc["Document Stats", "2019"])

    def test_availability_matrix_with_year_filter(self):
        df = availability_frame(build_index(RECORDS), CLAIMS, "2020")
        self.assertEqual(["table", "2020"], list(df.columns))
        self.assertEqual(["Claims Summary"], df["table"].tolist())

    def test_yearly_counts_and_plot(self):
        index = build_index(RECORDS)
        counts = yearly_format_counts(index, CLAIMS)
        self.assertEqual({"2019": {"DTA": 1, "CSV": 1}, "2020": {"DTA": 1, "CSV": 1}}, counts)
        with tempfile.TemporaryDirectory() as tmpdir:
            out_png = save_availability_plot(index, CLAIMS, Path(tmpdir) / "plots")
            self.assertTrue(out_png.exists())
            self.assertIsNone(save_availability_plot(index, "missing-dataset", Path(tmpdir) / "none"))


class PipelineTests(unittest.TestCase):
    def test_pipeline_writes_per_dataset_reports(self):
        cfg = {"reports": {"format": "csv"}, "plots": {"enabled": False}, "catalog": {}}
        with tempfile.TemporaryDirectory() as tmpdir:
            out_root = Path(tmpdir) / "out"
            index = run_catalog(RECORDS, cfg, out_root)

            self.assertEqual([CLAIMS, EXAM], list(index))
            self.assertTrue((out_root / "catalog.csv").exists(), "overall catalog missing")
            for ds in (CLAIMS, EXAM):
                self.assertTrue((out_root / ds / "catalog.csv").exists(), f"{ds} catalog missing")
                self.assertTrue((out_root / ds / "availability.csv").exists(), f"{ds} availability missing")
            self.assertFalse((out_root / CLAIMS / "availability.png").exists())

            df_all = pd.read_csv(out_root / "catalog.csv", dtype=str)
            self.assertEqual(sorted(r["shareable_link"] for r in RECORDS), sorted(df_all["shareable_link"]))

    def test_pipeline_year_filter_and_stata_output(self):
        cfg = {"reports": {"format": "both"}, "plots": {"enabled": True}, "catalog": {"year_filter": "2019"}}
        with tempfile.TemporaryDirectory() as tmpdir:
            out_root = Path(tmpdir) / "out"
            run_catalog(RECORDS, cfg, out_root)

            claims_dir = out_root / CLAIMS
            df_cat = pd.read_csv(claims_dir / "catalog.csv", dtype=str)
            self.assertEqual({"L1", "L4"}, set(df_cat["shareable_link"]))
            self.assertTrue((claims_dir / "catalog.dta").exists())
            self.assertTrue((claims_dir / "availability.png").exists())

            df_dta = pd.read_stata(claims_dir / "availability.dta")
            self.assertIn("y2019", df_dta.columns)
            self.assertEqual(2, len(df_dta))

            # the examination dataset has nothing in 2019
            df_exam = pd.read_csv(out_root / EXAM / "catalog.csv", dtype=str)
            self.assertEqual(0, len(df_exam))

    def test_main_reads_config_and_manifests(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            (root / "data").mkdir()
            (root / "data" / "uspto_links.json").write_text(json.dumps(RECORDS), encoding="utf-8")
            (root / "data" / "broken.json").write_text("{not json", encoding="utf-8")
            (root / "config.yaml").write_text(
                "input:\n  path: ./data\n  recurse: true\n"
                "output:\n  root: ./out\n"
                "logging:\n  verbose: false\n"
                "reports:\n  format: csv\n"
                "plots:\n  enabled: false\n",
                encoding="utf-8",
            )
            self.assertEqual(0, main([str(root / "config.yaml")]))
            self.assertTrue((root / "out" / "catalog.csv").exists())
            self.assertTrue((root / "out" / CLAIMS / "availability.csv").exists())

    def test_main_summary_uses_friendly_dataset_names(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            (root / "uspto_links.json").write_text(json.dumps(RECORDS), encoding="utf-8")
            (root / "config.yaml").write_text(
                "input:\n  path: ./uspto_links.json\n"
                "output:\n  root: ./out\n"
                "logging:\n"
                "reports:\n"
                "plots:\n  enabled: false\n",
                encoding="utf-8",
            )
            buf = io.StringIO()
            with contextlib.redirect_stdout(buf):
                self.assertEqual(0, main([str(root / "config.yaml")]))
        out = buf.getvalue()
        self.assertIn(f"[summary] Patent Claims Research Dataset ({CLAIMS}): 2 table(s), 4 file(s)", out)
        self.assertIn(f"[summary] Patent Examination Research Dataset (Public PAIR) ({EXAM}): 1 table(s), 1 file(s)", out)

    def test_empty_config_sections_use_defaults(self):
        cfg = {"reports": None, "plots": None, "catalog": None}
        with tempfile.TemporaryDirectory() as tmpdir:
            out_root = Path(tmpdir) / "out"
            with contextlib.redirect_stdout(io.StringIO()):
                run_catalog(RECORDS, cfg, out_root)
            self.assertTrue((out_root / CLAIMS / "catalog.csv").exists())
            self.assertTrue((out_root / CLAIMS / "availability.png").exists())

    def test_dataset_folders_stay_under_output_root(self):
        records = [
            {"path": "../evil", "table_name": "Claims 2019 CSV", "shareable_link": "X1"},
            {"path": "./a", "table_name": "Claims 2019 CSV", "shareable_link": "X2"},
            {"path": "real/a", "table_name": "Claims 2019 CSV", "shareable_link": "X3"},
            {"path": "catalog.csv/a", "table_name": "Claims 2019 CSV", "shareable_link": "X4"},
            {"path": "a\\..\\b/a", "table_name": "Claims 2019 CSV", "shareable_link": "X5"},
        ]
        cfg = {"reports": {"format": "csv"}, "plots": {"enabled": False}}
        with tempfile.TemporaryDirectory() as tmpdir:
            out_root = Path(tmpdir) / "out"
            run_catalog(records, cfg, out_root)

            self.assertFalse((Path(tmpdir) / "catalog.csv").exists())
            self.assertFalse((Path(tmpdir) / "availability.csv").exists())
            df_all = pd.read_csv(out_root / "catalog.csv", dtype=str)
            self.assertEqual({"X1", "X2", "X3", "X4", "X5"}, set(df_all["shareable_link"]))

            for folder in ("_..", "_.", "real", "catalog.csv-2", "a_.._b"):
                self.assertTrue((out_root / folder / "catalog.csv").exists(), f"{folder} catalog missing")
            self.assertTrue((out_root / "catalog.csv").is_file())

    def test_dataset_dirname_escapes_separators_and_dots(self):
        self.assertEqual(CLAIMS, dataset_dirname(CLAIMS))
        self.assertEqual("_..", dataset_dirname(".."))
        self.assertEqual("_.", dataset_dirname("."))
        self.assertEqual("_", dataset_dirname(""))
        self.assertEqual("a_b_c", dataset_dirname("a\\b:c"))
