import tempfile
import unittest
from pathlib import Path

from releasecheck.core.config import Config
from releasecheck.utils.filesystem import Filesystem
from releasecheck.validators.crd_validator import CRDSchemaValidator
from releasecheck.validators.kustomization_validator import KustomizationValidator
from releasecheck.validators.readme_validator import ReadmeValidator
from releasecheck.validators.release_notes_validator import ReleaseNotesValidator
from releasecheck.validators.uniqueness_validator import UniquenessValidator

from release_tree import BASE_URL, build_tree, release_manifest, write_release, write_yaml


class TreeTestCase(unittest.TestCase):

    validator_class = None

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.config = Config()

    def tearDown(self):
        self._tmp.cleanup()

    def run_validator(self):
        validator = self.validator_class("aws", Filesystem(self.root), self.config)
        validator.validate()
        return validator


class TestReleaseNotesValidator(TreeTestCase):

    validator_class = ReleaseNotesValidator

    def test_valid_notes_pass(self):
        build_tree(self.root)
        self.assertEqual(self.run_validator().errors, [])

    def test_version_missing_from_first_line(self):
        build_tree(self.root)
        (self.root / "aws" / "v13.1.0" / "README.md").write_text("# Release notes\n\nv13.1.0\n", encoding="utf-8")

        errors = self.run_validator().errors

        self.assertEqual(len(errors), 1)
        self.assertIn("aws release v13.1.0", errors[0])

    def test_only_one_v_prefix_is_stripped(self):
        build_tree(self.root, releases=[release_manifest("vv13.0.0")])
        (self.root / "aws" / "vv13.0.0" / "README.md").write_text("# Release 13.0.0\n", encoding="utf-8")

        errors = self.run_validator().errors

        self.assertEqual(len(errors), 1)
        self.assertIn("aws release vv13.0.0", errors[0])

    def test_missing_notes(self):
        build_tree(self.root)
        (self.root / "aws" / "v13.0.0" / "README.md").unlink()

        errors = self.run_validator().errors

        self.assertEqual(len(errors), 1)
        self.assertIn("Missing release notes", errors[0])


class TestReadmeValidator(TreeTestCase):

    validator_class = ReadmeValidator

    def test_all_releases_linked(self):
        build_tree(self.root, archived=[release_manifest("v11.0.0", state="deprecated")])

        validator = self.run_validator()

        self.assertEqual(validator.errors, [])
        self.assertEqual(validator.info["Archived Releases"], 1)

    def test_missing_links(self):
        build_tree(self.root, archived=[release_manifest("v11.0.0", state="deprecated")])
        (self.root / "README.md").write_text("# Releases\n", encoding="utf-8")

        errors = self.run_validator().errors

        self.assertEqual(len(errors), 3)
        self.assertIn("archived aws release v11.0.0", errors[2])

    def test_missing_readme(self):
        build_tree(self.root)
        (self.root / "README.md").unlink()

        self.assertIn("Missing repository README", self.run_validator().errors[0])

    def test_links_to_missing_releases_are_warnings(self):
        build_tree(self.root)
        with open(self.root / "README.md", "a", encoding="utf-8") as f:
            f.write(f"- [v12.0.0]({BASE_URL}/aws/v12.0.0)\n- [v10.0.0]({BASE_URL}/aws/archived/v10.0.0/README.md)\n")

        validator = self.run_validator()

        self.assertEqual(validator.errors, [])
        self.assertEqual(validator.warnings, [
            "README.md links to aws release v12.0.0, which does not exist.",
            "README.md links to archived aws release v10.0.0, which does not exist.",
        ])

    def test_base_url_is_configurable(self):
        build_tree(self.root)
        self.config.set("readme.base_url", "https://example.com/releases/")

        self.assertEqual(len(self.run_validator().errors), 2)


class TestKustomizationValidator(TreeTestCase):

    validator_class = KustomizationValidator

    def test_consistent_tree_passes(self):
        build_tree(self.root)
        self.assertEqual(self.run_validator().errors, [])

    def test_unregistered_release(self):
        build_tree(self.root)
        write_yaml(self.root / "aws" / "kustomization.yaml", {"resources": ["v13.0.0"]})

        errors = self.run_validator().errors

        self.assertEqual(errors, ["Release v13.1.0 not registered in aws/kustomization.yaml."])

    def test_registered_resource_without_release(self):
        build_tree(self.root)
        write_yaml(self.root / "aws" / "kustomization.yaml", {"resources": ["v13.0.0", "v13.1.0", "v14.0.0"]})

        errors = self.run_validator().errors

        self.assertEqual(len(errors), 1)
        self.assertIn("v14.0.0 registered in aws/kustomization.yaml resources but not found", errors[0])

    def test_release_kustomization_must_only_list_manifest(self):
        build_tree(self.root)
        write_yaml(self.root / "aws" / "v13.0.0" / "kustomization.yaml", {"resources": ["release.yaml", "extra.yaml"]})

        errors = self.run_validator().errors

        self.assertEqual(len(errors), 1)
        self.assertIn('should contain only one resource, "release.yaml"', errors[0])

    def test_unknown_kustomization_keys_are_rejected(self):
        build_tree(self.root)
        write_yaml(self.root / "aws" / "kustomization.yaml", {"resources": ["v13.0.0", "v13.1.0"], "patches": []})

        errors = self.run_validator().errors

        self.assertEqual(len(errors), 1)
        self.assertIn("does not match the expected kustomization format", errors[0])

    def test_missing_release_kustomization(self):
        build_tree(self.root)
        (self.root / "aws" / "v13.1.0" / "kustomization.yaml").unlink()

        errors = self.run_validator().errors

        self.assertEqual(len(errors), 1)
        self.assertIn("Missing file", errors[0])


class TestCRDSchemaValidator(TreeTestCase):

    validator_class = CRDSchemaValidator

    def test_valid_manifests_pass(self):
        build_tree(self.root)
        self.assertEqual(self.run_validator().errors, [])

    def test_invalid_manifest_lists_every_problem(self):
        manifest = release_manifest("v13.0.0", components=[{"name": "etcd", "version": "three"}])
        manifest["spec"]["state"] = "retired"
        build_tree(self.root, releases=[manifest])

        errors = self.run_validator().errors

        self.assertEqual(len(errors), 1)
        self.assertIn("Invalid aws release v13.0.0", errors[0])
        self.assertIn("spec.components.0.version", errors[0])
        self.assertIn("spec.state", errors[0])

    def test_semver_prerelease_tags_pass(self):
        build_tree(self.root, releases=[release_manifest("v13.0.0", components=[{"name": "etcd", "version": "3.4.13-gs1"}])])
        self.assertEqual(self.run_validator().errors, [])

    def test_missing_date_is_a_schema_error(self):
        build_tree(self.root, releases=[release_manifest("v13.0.0", date=None)])

        errors = self.run_validator().errors

        self.assertEqual(len(errors), 1)
        self.assertIn("'date' is a required property", errors[0])


class TestUniquenessValidator(TreeTestCase):

    validator_class = UniquenessValidator

    def test_unique_releases_pass(self):
        build_tree(self.root)

        validator = self.run_validator()

        self.assertEqual(validator.errors, [])
        self.assertEqual(validator.info["Unique Releases"], 2)

    def test_duplicate_content(self):
        components = [{"name": "etcd", "version": "3.4.13"}]
        build_tree(self.root, releases=[
            release_manifest("v13.0.0", components=components),
            release_manifest("v13.0.1", components=components),
        ])

        errors = self.run_validator().errors

        self.assertEqual(errors, ["Release v13.0.1 has the same components and apps as release v13.0.0."])

    def test_duplicate_version(self):
        build_tree(self.root, releases=[release_manifest("v13.0.0")])
        write_release(self.root, "aws", release_manifest("13.0.0", components=[{"name": "etcd", "version": "3.4.0"}]))

        errors = self.run_validator().errors

        self.assertEqual(len(errors), 1)
        self.assertIn("duplicates the version of release", errors[0])

    def test_semver_prerelease_tags_are_valid_versions(self):
        build_tree(self.root, releases=[
            release_manifest("v13.0.0", components=[{"name": "etcd", "version": "3.4.13-gs1"}]),
            release_manifest("v13.0.1", components=[{"name": "etcd", "version": "3.4.13-5ab24fa0"}]),
        ])

        self.assertEqual(self.run_validator().errors, [])

    def test_missing_date_and_invalid_versions(self):
        build_tree(self.root, releases=[
            release_manifest("v13.0.0", date=None, components=[{"name": "etcd", "version": "latest"}]),
        ])

        errors = self.run_validator().errors

        self.assertEqual(len(errors), 2)
        self.assertIn("component etcd has an invalid version 'latest'", errors[0])
        self.assertIn("has no release date", errors[1])


if __name__ == '__main__':
    unittest.main()
