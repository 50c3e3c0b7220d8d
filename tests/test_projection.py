"""Field projection tests: id is always present, names resolve loosely, unknown names drop out."""
import uuid
from datetime import date

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from emr.models import Comorbidity, Invoice, Patient
from emr.projection import map_to_fields, relations_to_load, split_fields
from emr.services import patient_service


def _patient() -> Patient:
    return Patient(
        id=uuid.uuid4(),
        first_name="Asha",
        last_name="Iyer",
        date_of_birth=date(1988, 5, 17),
        gender="F",
    )


def test_split_fields():
    assert split_fields(None) == []
    assert split_fields("") == []
    assert split_fields(" first_name , ,lastName") == ["first_name", "lastName"]


def test_missing_entity_projects_to_none():
    assert map_to_fields(None, "first_name") is None


def test_no_fields_returns_id_only():
    patient = _patient()
    assert map_to_fields(patient, None) == {"id": patient.id}


def test_requested_fields_in_any_spelling():
    patient = _patient()
    data = map_to_fields(patient, "FirstName,last_name,dateOfBirth")
    assert data == {
        "id": patient.id,
        "first_name": "Asha",
        "last_name": "Iyer",
        "date_of_birth": date(1988, 5, 17),
    }


def test_unknown_fields_are_ignored():
    patient = _patient()
    data = map_to_fields(patient, "first_name,blood_group,ward.name")
    assert data == {"id": patient.id, "first_name": "Asha"}


def test_dotted_field_on_unloaded_relation_is_none():
    patient = _patient()
    assert map_to_fields(patient, "comorbidity.name") == {"id": patient.id, "comorbidity": None}


def test_relations_to_load_only_for_dotted_names():
    fields = "invoice_number,patient.first_name,dayVisit.status,Patient.last_name,unknown.x"
    assert relations_to_load(Invoice, fields) == ["patient", "day_visit"]
    assert relations_to_load(Invoice, "invoice_number,total_amount") == []
    assert relations_to_load(Invoice, None) == []


@pytest.mark.asyncio
async def test_get_by_id_projects_related_fields(db_session: AsyncSession):
    condition = Comorbidity(name="Hypertension", code="I10")
    db_session.add(condition)
    await db_session.flush()
    patient = Patient(first_name="Ravi", last_name="Nair", comorbidity_id=condition.id)
    db_session.add(patient)
    await db_session.flush()

    data = await patient_service.get_by_id(
        db_session, patient.id, "first_name,comorbidity.name,comorbidity.code,comorbidity.bogus"
    )
    assert data == {
        "id": patient.id,
        "first_name": "Ravi",
        "comorbidity": {"id": condition.id, "name": "Hypertension", "code": "I10"},
    }
