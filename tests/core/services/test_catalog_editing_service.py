import pytest

from patient_education.core.models import Banner, FileAttachment, FileType
from patient_education.core.services.catalog_editing_service import CatalogEditingService


@pytest.fixture
def service():
    return CatalogEditingService()


@pytest.fixture
def leaflet():
    return FileAttachment("1700000000000-leaflet.pdf", "Leaflet", "", FileType.PDF, "file:///tmp/leaflet.pdf")


class TestSections:

    def test_add_section_appends_with_derived_id(self, service, sample_sections):
        new = service.add_section(sample_sections, "Blood Disorders", "drop", "bg-red-100")

        assert len(new) == 3
        assert new[-1].id == "blood-disorders"
        assert new[-1].diseases == ()
        assert new[0] is sample_sections[0]
        assert new[1] is sample_sections[1]

    def test_add_section_does_not_guard_duplicates(self, service, sample_sections):
        new = service.add_section(sample_sections, "Heart", "x", "y")
        assert [s.id for s in new] == ["heart", "lungs", "heart"]

    def test_update_section_keeps_diseases_and_id(self, service, sample_sections):
        new = service.update_section(sample_sections, "heart", "Cardiology", "pulse", "bg-red-200")

        heart = new[0]
        assert (heart.id, heart.name, heart.icon, heart.color_class) == ("heart", "Cardiology", "pulse", "bg-red-200")
        assert heart.diseases is sample_sections[0].diseases
        assert new[1] is sample_sections[1]

    def test_update_missing_section_is_identity(self, service, sample_sections):
        assert service.update_section(sample_sections, "skin", "Skin", "", "") is sample_sections

    def test_delete_section_is_idempotent(self, service, sample_sections):
        once = service.delete_section(sample_sections, "heart")
        twice = service.delete_section(once, "heart")

        assert [s.id for s in once] == ["lungs"]
        assert twice is once
        assert once[0] is sample_sections[1]


class TestDiseases:

    def test_add_disease_appends_to_target_section_only(self, service, sample_sections):
        new = service.add_disease(sample_sections, "lungs", "Chronic Bronchitis", "Cough")

        lungs = new[1]
        assert [d.id for d in lungs.diseases] == ["asthma", "chronic-bronchitis"]
        assert lungs.diseases[-1].files == ()
        assert lungs.diseases[0] is sample_sections[1].diseases[0]
        assert new[0] is sample_sections[0]

    def test_add_disease_to_missing_section_is_identity(self, service, sample_sections):
        assert service.add_disease(sample_sections, "skin", "Eczema", "") is sample_sections

    def test_update_disease_shares_unaffected_branches(self, service, sample_sections):
        new = service.update_disease(sample_sections, "heart", "angina", "Stable Angina", "New text")

        assert new is not sample_sections
        assert new[1] is sample_sections[1]
        heart = new[0]
        assert heart is not sample_sections[0]
        assert heart.diseases[1] is sample_sections[0].diseases[1]
        angina = heart.diseases[0]
        assert (angina.id, angina.name, angina.description) == ("angina", "Stable Angina", "New text")
        assert angina.files is sample_sections[0].diseases[0].files

    def test_update_disease_does_not_touch_previous_root(self, service, sample_sections):
        service.update_disease(sample_sections, "heart", "angina", "Changed", "Changed")
        assert sample_sections[0].diseases[0].name == "Angina"

    @pytest.mark.parametrize("section_id,disease_id", [
        ("skin", "angina"),
        ("heart", "asthma"),
    ])
    def test_update_disease_with_absent_target_is_identity(self, service, sample_sections, section_id, disease_id):
        assert service.update_disease(sample_sections, section_id, disease_id, "X", "Y") is sample_sections

    def test_delete_disease_removes_its_files(self, service, sample_sections):
        new = service.delete_disease(sample_sections, "heart", "angina")

        assert [d.id for d in new[0].diseases] == ["arrhythmia"]
        assert all(f.id != "angina-0" for s in new for d in s.diseases for f in d.files)
        assert new[1] is sample_sections[1]

    def test_delete_disease_absent_is_identity(self, service, sample_sections):
        assert service.delete_disease(sample_sections, "lungs", "angina") is sample_sections


class TestFiles:

    def test_add_file_appends(self, service, sample_sections, leaflet):
        new = service.add_file_to_disease(sample_sections, "heart", "arrhythmia", leaflet)

        arrhythmia = new[0].diseases[1]
        assert arrhythmia.files == (leaflet,)
        assert new[0].diseases[0] is sample_sections[0].diseases[0]

    def test_add_file_absent_target_is_identity(self, service, sample_sections, leaflet):
        assert service.add_file_to_disease(sample_sections, "heart", "asthma", leaflet) is sample_sections

    def test_delete_file(self, service, sample_sections):
        new = service.delete_file_from_disease(sample_sections, "heart", "angina", "angina-0")
        assert new[0].diseases[0].files == ()
        assert new[0].diseases[1] is sample_sections[0].diseases[1]

    @pytest.mark.parametrize("ids", [
        ("skin", "angina", "angina-0"),
        ("heart", "arrhythmia", "angina-0"),
        ("heart", "angina", "angina-9"),
    ])
    def test_delete_file_absent_is_identity(self, service, sample_sections, ids):
        assert service.delete_file_from_disease(sample_sections, *ids) is sample_sections


class TestBanners:

    def test_add_banner(self, service, sample_banners):
        banner = Banner("1700000000000-new.jpg", "New", "", "file:///tmp/new.jpg")
        new = service.add_banner(sample_banners, banner)
        assert new[-1] is banner
        assert new[:2] == sample_banners

    def test_update_banner_keeps_image_when_none_given(self, service, sample_banners):
        new = service.update_banner(sample_banners, "b1", "Flu", "Today")
        assert (new[0].title, new[0].description, new[0].image_url) == ("Flu", "Today", "./banners/flu.jpg")
        assert new[1] is sample_banners[1]

    def test_update_banner_replaces_image(self, service, sample_banners):
        new = service.update_banner(sample_banners, "b2", "Open", "", "file:///tmp/x.jpg")
        assert new[1].image_url == "file:///tmp/x.jpg"

    def test_update_and_delete_missing_banner_are_identity(self, service, sample_banners):
        assert service.update_banner(sample_banners, "b9", "x", "y") is sample_banners
        assert service.delete_banner(sample_banners, "b9") is sample_banners

    def test_delete_banner(self, service, sample_banners):
        assert [b.id for b in service.delete_banner(sample_banners, "b1")] == ["b2"]


def test_no_orphans_after_mixed_operations(service, sample_sections, leaflet):
    sections = sample_sections
    sections = service.add_section(sections, "Skin", "s", "c")
    sections = service.add_disease(sections, "skin", "Eczema", "Itch")
    sections = service.add_file_to_disease(sections, "skin", "eczema", leaflet)
    sections = service.delete_disease(sections, "heart", "angina")
    sections = service.delete_section(sections, "skin")
    sections = service.add_disease(sections, "skin", "Psoriasis", "")

    assert [s.id for s in sections] == ["heart", "lungs"]
    file_ids = [f.id for s in sections for d in s.diseases for f in d.files]
    assert file_ids == []
    disease_ids = [d.id for s in sections for d in s.diseases]
    assert disease_ids == ["arrhythmia", "asthma"]
