# =============================================================================
# tests/test_services.py - Service Layer Tests
# =============================================================================
# Model functions are patched where the services import them, so these tests
# cover business rules only: derived fields, owner limits, cascades, averages
# and photo handling.
# =============================================================================

import io
from unittest.mock import AsyncMock, MagicMock, call, patch

import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError
from starlette.datastructures import Headers, UploadFile

from bootcamp_api.core.exceptions import BadRequestError, GeocodingError, OwnerLimitError
from bootcamp_api.schemas.bootcamp import BootcampCreate, BootcampUpdate
from bootcamp_api.schemas.course import CourseCreate
from bootcamp_api.services import bootcamp_service, course_service, review_service
from bootcamp_api.utils.geocoder import GeoResult

BOOTCAMP_SERVICE = "bootcamp_api.services.bootcamp_service"
COURSE_SERVICE = "bootcamp_api.services.course_service"
REVIEW_SERVICE = "bootcamp_api.services.review_service"


def bootcamp_payload(**overrides) -> BootcampCreate:
    data = {
        "name": "Devworks Bootcamp",
        "description": "Devworks is a full stack JavaScript Bootcamp",
        "address": "233 Bay State Rd Boston MA 02215",
        "careers": ["Web Development", "UI/UX"],
        **overrides,
    }
    return BootcampCreate(**data)


def upload(filename: str, content: bytes, content_type: str) -> UploadFile:
    return UploadFile(
        file=io.BytesIO(content),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


# =============================================================================
# Bootcamp Tests
# =============================================================================

class TestCreateBootcamp:
    async def test_derives_slug_location_and_owner(self, fake_db, geocoder, publisher):
        with patch(f"{BOOTCAMP_SERVICE}.find_bootcamp_by_owner", AsyncMock(return_value=None)), \
                patch(f"{BOOTCAMP_SERVICE}.insert_bootcamp", AsyncMock(side_effect=lambda db, d: {**d, "_id": ObjectId()})) as insert:
            bootcamp = await bootcamp_service.create_bootcamp(fake_db, geocoder, bootcamp_payload(), publisher)

        stored = insert.await_args.args[1]
        assert "address" not in stored
        assert stored["slug"] == "devworks-bootcamp"
        assert stored["user"] == publisher["_id"]
        assert stored["singleOwner"] is True
        assert stored["location"]["type"] == "Point"
        assert stored["location"]["coordinates"] == [-71.104028, 42.350846]
        assert stored["location"]["city"] == "Boston"
        assert bootcamp["slug"] == "devworks-bootcamp"

    async def test_second_bootcamp_is_rejected(self, fake_db, geocoder, publisher, bootcamp_doc):
        with patch(f"{BOOTCAMP_SERVICE}.find_bootcamp_by_owner", AsyncMock(return_value=bootcamp_doc)), \
                patch(f"{BOOTCAMP_SERVICE}.insert_bootcamp", AsyncMock()) as insert:
            with pytest.raises(OwnerLimitError) as exc_info:
                await bootcamp_service.create_bootcamp(fake_db, geocoder, bootcamp_payload(), publisher)

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == f"The user with id {publisher['_id']} has already published a bootcamp"
        insert.assert_not_awaited()

    async def test_admin_may_publish_many(self, fake_db, geocoder, admin):
        owner_lookup = AsyncMock(return_value={"_id": ObjectId()})
        with patch(f"{BOOTCAMP_SERVICE}.find_bootcamp_by_owner", owner_lookup), \
                patch(f"{BOOTCAMP_SERVICE}.insert_bootcamp", AsyncMock(side_effect=lambda db, d: {**d, "_id": ObjectId()})) as insert:
            await bootcamp_service.create_bootcamp(fake_db, geocoder, bootcamp_payload(), admin)

        owner_lookup.assert_not_awaited()
        assert insert.await_args.args[1]["singleOwner"] is False

    async def test_concurrent_create_maps_to_owner_limit(self, fake_db, geocoder, publisher):
        race = DuplicateKeyError("E11000 duplicate key", 11000, {"keyPattern": {"user": 1}})
        with patch(f"{BOOTCAMP_SERVICE}.find_bootcamp_by_owner", AsyncMock(return_value=None)), \
                patch(f"{BOOTCAMP_SERVICE}.insert_bootcamp", AsyncMock(side_effect=race)):
            with pytest.raises(OwnerLimitError):
                await bootcamp_service.create_bootcamp(fake_db, geocoder, bootcamp_payload(), publisher)

    async def test_duplicate_name_propagates(self, fake_db, geocoder, publisher):
        dup = DuplicateKeyError("E11000 duplicate key", 11000, {"keyPattern": {"name": 1}})
        with patch(f"{BOOTCAMP_SERVICE}.find_bootcamp_by_owner", AsyncMock(return_value=None)), \
                patch(f"{BOOTCAMP_SERVICE}.insert_bootcamp", AsyncMock(side_effect=dup)):
            with pytest.raises(DuplicateKeyError):
                await bootcamp_service.create_bootcamp(fake_db, geocoder, bootcamp_payload(), publisher)

    async def test_ungeocodable_address(self, fake_db, publisher):
        geocoder = MagicMock()
        geocoder.geocode = AsyncMock(side_effect=GeocodingError("nowhere"))
        with patch(f"{BOOTCAMP_SERVICE}.find_bootcamp_by_owner", AsyncMock(return_value=None)), \
                patch(f"{BOOTCAMP_SERVICE}.insert_bootcamp", AsyncMock()) as insert:
            with pytest.raises(GeocodingError):
                await bootcamp_service.create_bootcamp(fake_db, geocoder, bootcamp_payload(), publisher)
        insert.assert_not_awaited()


class TestUpdateBootcamp:
    async def test_rename_regenerates_slug(self, fake_db, geocoder, bootcamp_doc):
        with patch(f"{BOOTCAMP_SERVICE}.update_bootcamp_fields", AsyncMock(return_value=bootcamp_doc)) as update:
            await bootcamp_service.update_bootcamp(fake_db, geocoder, bootcamp_doc, BootcampUpdate(name="Code Masters"))

        update.assert_awaited_once_with(fake_db, bootcamp_doc["_id"], {"name": "Code Masters", "slug": "code-masters"})

    async def test_new_address_is_geocoded(self, fake_db, geocoder, bootcamp_doc):
        with patch(f"{BOOTCAMP_SERVICE}.update_bootcamp_fields", AsyncMock(return_value=bootcamp_doc)) as update:
            await bootcamp_service.update_bootcamp(
                fake_db, geocoder, bootcamp_doc, BootcampUpdate(address="233 Bay State Rd Boston MA")
            )

        fields = update.await_args.args[2]
        assert "address" not in fields
        assert fields["location"]["zipcode"] == "02215"

    async def test_untouched_fields_are_not_sent(self, fake_db, geocoder, bootcamp_doc):
        with patch(f"{BOOTCAMP_SERVICE}.update_bootcamp_fields", AsyncMock(return_value=bootcamp_doc)) as update:
            await bootcamp_service.update_bootcamp(fake_db, geocoder, bootcamp_doc, BootcampUpdate(housing=True))

        update.assert_awaited_once_with(fake_db, bootcamp_doc["_id"], {"housing": True})


class TestDeleteCascade:
    async def test_children_deleted_before_bootcamp(self, fake_db, bootcamp_doc):
        order = MagicMock()
        order.courses = AsyncMock(return_value=2)
        order.reviews = AsyncMock(return_value=1)
        order.bootcamp = AsyncMock(return_value=1)

        with patch(f"{BOOTCAMP_SERVICE}.delete_courses_by_bootcamp", order.courses), \
                patch(f"{BOOTCAMP_SERVICE}.delete_reviews_by_bootcamp", order.reviews), \
                patch(f"{BOOTCAMP_SERVICE}.delete_bootcamp", order.bootcamp):
            await bootcamp_service.delete_bootcamp_cascade(fake_db, bootcamp_doc)

        bootcamp_id = bootcamp_doc["_id"]
        assert order.mock_calls == [
            call.courses(fake_db, bootcamp_id),
            call.reviews(fake_db, bootcamp_id),
            call.bootcamp(fake_db, bootcamp_id),
        ]

    async def test_transaction_passes_session(self, fake_db, bootcamp_doc):
        session = MagicMock()
        session.__aenter__ = AsyncMock(return_value=session)
        session.__aexit__ = AsyncMock(return_value=False)
        transaction = MagicMock()
        transaction.__aenter__ = AsyncMock(return_value=transaction)
        transaction.__aexit__ = AsyncMock(return_value=False)
        session.start_transaction.return_value = transaction

        fake_db.use_transactions = True
        fake_db.client.start_session = AsyncMock(return_value=session)

        with patch(f"{BOOTCAMP_SERVICE}.delete_courses_by_bootcamp", AsyncMock()) as courses, \
                patch(f"{BOOTCAMP_SERVICE}.delete_reviews_by_bootcamp", AsyncMock()) as reviews, \
                patch(f"{BOOTCAMP_SERVICE}.delete_bootcamp", AsyncMock()) as bootcamp:
            await bootcamp_service.delete_bootcamp_cascade(fake_db, bootcamp_doc)

        for deleted in (courses, reviews, bootcamp):
            assert deleted.await_args.kwargs == {"session": session}
        transaction.__aexit__.assert_awaited_once()


class TestRadius:
    async def test_distance_converted_to_radians(self, fake_db, geocoder):
        with patch(f"{BOOTCAMP_SERVICE}.find_bootcamps_within", AsyncMock(return_value=[])) as within:
            await bootcamp_service.find_in_radius(fake_db, geocoder, "02118", 6378)

        within.assert_awaited_once_with(fake_db, -71.104028, 42.350846, 1.0)


class TestUploadPhoto:
    async def test_stores_file_named_after_bootcamp(self, fake_db, bootcamp_doc, test_settings):
        with patch(f"{BOOTCAMP_SERVICE}.update_bootcamp_fields", AsyncMock()) as update:
            filename = await bootcamp_service.upload_photo(
                fake_db, bootcamp_doc, upload("me.jpg", b"\xff\xd8jpeg", "image/jpeg"), test_settings
            )

        assert filename == f"photo_{bootcamp_doc['_id']}.jpg"
        stored = test_settings.FILE_UPLOAD_PATH + "/" + filename
        with open(stored, "rb") as fh:
            assert fh.read() == b"\xff\xd8jpeg"
        update.assert_awaited_once_with(fake_db, bootcamp_doc["_id"], {"photo": filename})

    async def test_missing_file(self, fake_db, bootcamp_doc, test_settings):
        with pytest.raises(BadRequestError, match="Please upload a file"):
            await bootcamp_service.upload_photo(fake_db, bootcamp_doc, None, test_settings)

    async def test_rejects_non_images(self, fake_db, bootcamp_doc, test_settings):
        with pytest.raises(BadRequestError, match="Please upload an image file"):
            await bootcamp_service.upload_photo(
                fake_db, bootcamp_doc, upload("notes.txt", b"hello", "text/plain"), test_settings
            )

    async def test_rejects_large_images(self, fake_db, bootcamp_doc, test_settings):
        too_big = b"x" * (test_settings.MAX_FILE_UPLOAD + 1)
        with pytest.raises(BadRequestError, match=f"less than {test_settings.MAX_FILE_UPLOAD} bytes"):
            await bootcamp_service.upload_photo(
                fake_db, bootcamp_doc, upload("big.png", too_big, "image/png"), test_settings
            )


# =============================================================================
# Average Tests
# =============================================================================

class TestAverageCost:
    @pytest.mark.parametrize("average,expected", [
        (9500.0, 9500),
        (9501.0, 9510),
        (11166.67, 11170),
        (0.0, 0),
    ])
    def test_round_up_cost(self, average, expected):
        assert course_service.round_up_cost(average) == expected

    async def test_sets_rounded_average(self, fake_db):
        bootcamp_id = ObjectId()
        with patch(f"{COURSE_SERVICE}.average_tuition", AsyncMock(return_value=9250.5)), \
                patch(f"{COURSE_SERVICE}.update_bootcamp_fields", AsyncMock()) as update:
            await course_service.update_average_cost(fake_db, bootcamp_id)

        update.assert_awaited_once_with(fake_db, bootcamp_id, {"averageCost": 9260})

    async def test_unsets_when_no_courses(self, fake_db):
        bootcamp_id = ObjectId()
        with patch(f"{COURSE_SERVICE}.average_tuition", AsyncMock(return_value=None)), \
                patch(f"{COURSE_SERVICE}.update_bootcamp_fields", AsyncMock()) as update:
            await course_service.update_average_cost(fake_db, bootcamp_id)

        update.assert_awaited_once_with(fake_db, bootcamp_id, {}, unset=("averageCost",))

    async def test_failure_is_logged_not_raised(self, fake_db, caplog):
        bootcamp_id = ObjectId()
        error = RuntimeError("boom")
        with patch(f"{COURSE_SERVICE}.average_tuition", AsyncMock(side_effect=error)):
            await course_service.update_average_cost(fake_db, bootcamp_id)

        [record] = [r for r in caplog.records if r.name == COURSE_SERVICE]
        assert record.msg == "Failed to update average cost for bootcamp %s: %s"
        assert record.args == (bootcamp_id, error)
        assert f"Failed to update average cost for bootcamp {bootcamp_id}: boom" in caplog.text

    async def test_create_course_links_and_recomputes(self, fake_db, bootcamp_doc, publisher):
        payload = CourseCreate(
            title="Front End Web Development",
            description="HTML, CSS and JavaScript",
            weeks="8",
            tuition=8000,
            minimumSkill="beginner",
        )
        with patch(f"{COURSE_SERVICE}.insert_course", AsyncMock(side_effect=lambda db, d: {**d, "_id": ObjectId()})) as insert, \
                patch(f"{COURSE_SERVICE}.update_average_cost", AsyncMock()) as recompute:
            course = await course_service.create_course(fake_db, bootcamp_doc, payload, publisher)

        stored = insert.await_args.args[1]
        assert stored["bootcamp"] == bootcamp_doc["_id"]
        assert stored["user"] == publisher["_id"]
        assert stored["minimumSkill"] == "beginner"
        assert stored["scholarshipAvailable"] is False
        assert course["title"] == "Front End Web Development"
        recompute.assert_awaited_once_with(fake_db, bootcamp_doc["_id"])

    async def test_remove_course_recomputes(self, fake_db):
        course = {"_id": ObjectId(), "bootcamp": ObjectId()}
        with patch(f"{COURSE_SERVICE}.delete_course", AsyncMock()) as delete, \
                patch(f"{COURSE_SERVICE}.update_average_cost", AsyncMock()) as recompute:
            await course_service.remove_course(fake_db, course)

        delete.assert_awaited_once_with(fake_db, course["_id"])
        recompute.assert_awaited_once_with(fake_db, course["bootcamp"])


class TestAverageRating:
    async def test_rounds_to_one_decimal(self, fake_db):
        bootcamp_id = ObjectId()
        with patch(f"{REVIEW_SERVICE}.average_rating", AsyncMock(return_value=7.666)), \
                patch(f"{REVIEW_SERVICE}.update_bootcamp_fields", AsyncMock()) as update:
            await review_service.update_average_rating(fake_db, bootcamp_id)

        update.assert_awaited_once_with(fake_db, bootcamp_id, {"averageRating": 7.7})

    async def test_unsets_when_no_reviews(self, fake_db):
        bootcamp_id = ObjectId()
        with patch(f"{REVIEW_SERVICE}.average_rating", AsyncMock(return_value=None)), \
                patch(f"{REVIEW_SERVICE}.update_bootcamp_fields", AsyncMock()) as update:
            await review_service.update_average_rating(fake_db, bootcamp_id)

        update.assert_awaited_once_with(fake_db, bootcamp_id, {}, unset=("averageRating",))
