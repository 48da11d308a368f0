"""Seed the database with mock patients, notes, emergency contacts and legal tutors."""

from patient_records.app import RecordsApp
from patient_records.config import Settings, load_settings

MOCK_PATIENTS = [
    {
        "name": "Ana Ruiz",
        "age": 34,
        "email": "ana.ruiz@email.com",
        "phoneNumber": "555-0101",
        "birthDate": "1991-03-15",
        "maritalStatus": "married",
        "gender": "female",
        "sexualOrientation": "heterosexual",
        "educationalLevel": "University",
        "profession": "Architect",
        "livesWith": "Partner",
        "children": 1,
        "previousPsychologicalExperience": "Two years of CBT in 2019",
        "status": "active",
    },
    {
        "name": "Marcos Vidal",
        "age": 27,
        "email": "marcos.vidal@email.com",
        "phoneNumber": "555-0102",
        "birthDate": "1998-07-22",
        "maritalStatus": "single",
        "gender": "male",
        "educationalLevel": "Secondary",
        "profession": "Barista",
        "livesWith": "Roommates",
        "children": 0,
        "status": "paused",
    },
    {
        "name": "Lucía Moreno",
        "age": 15,
        "email": "lucia.moreno@email.com",
        "phoneNumber": "555-0103",
        "birthDate": "2010-11-08",
        "maritalStatus": "not_specified",
        "gender": "female",
        "sexualOrientation": "prefer_not_to_say",
        "educationalLevel": "Secondary (in progress)",
        "profession": "Student",
        "livesWith": "Parents",
        "children": 0,
        "status": "active",
    },
]

# (patient email, title, content)
MOCK_NOTES = [
    ("ana.ruiz@email.com", "Intake session", "<p>Reports work-related anxiety and poor sleep.</p>"),
    ("ana.ruiz@email.com", "Follow-up", "<p>Sleep hygiene plan reviewed; some improvement.</p>"),
    ("lucia.moreno@email.com", "First session", "<p>Referred by school counselor.</p>"),
]

# (patient email, full name, phone, relation, email, address)
MOCK_EMERGENCY_CONTACTS = [
    ("ana.ruiz@email.com", "Pablo Ruiz", "555-0201", "Husband", "pablo.ruiz@email.com", "12 Calle Mayor"),
    ("marcos.vidal@email.com", "Elena Vidal", "555-0202", "Mother", "elena.vidal@email.com", None),
]

# (patient email, full name, phone, relation, email, birth date)
MOCK_LEGAL_TUTORS = [
    ("lucia.moreno@email.com", "Carmen Moreno", "555-0301", "Mother", "carmen.moreno@email.com", "1980-05-02"),
]


def seed_database(settings: Settings | None = None) -> None:
    """Initialize and seed the database with mock data."""
    print("Initializing database...")
    with RecordsApp(settings or load_settings()) as app:
        patient_ids = {}

        print("Creating mock patients...")
        for data in MOCK_PATIENTS:
            existing = app.patient_service.patient_repository.find_by_email(data["email"])
            if existing:
                print(f"  Skipping {data['name']} (already exists)")
                patient_ids[data["email"]] = existing.id
            else:
                patient = app.patient_service.create_patient(data)
                patient_ids[data["email"]] = patient.id
                print(f"  Created {patient.name}")

        print("Creating mock notes...")
        for email, title, content in MOCK_NOTES:
            existing = app.note_service.get_notes_by_patient_id(patient_ids[email])
            if any(n.title == title for n in existing):
                print(f"  Skipping note: {title} (already exists)")
                continue
            app.note_service.create_note({"patientId": patient_ids[email], "title": title, "content": content})
            print(f"  Created note: {title}")

        print("Creating mock emergency contacts...")
        for email, full_name, phone, relation, contact_email, address in MOCK_EMERGENCY_CONTACTS:
            existing = app.emergency_contact_service.get_emergency_contacts_by_patient_id(patient_ids[email])
            if any(c.email == contact_email for c in existing):
                print(f"  Skipping {full_name} (already exists)")
                continue
            app.emergency_contact_service.create_emergency_contact({
                "patientId": patient_ids[email],
                "fullName": full_name,
                "phoneNumber": phone,
                "relation": relation,
                "email": contact_email,
                "address": address,
            })
            print(f"  Created {full_name}")

        print("Creating mock legal tutors...")
        for email, full_name, phone, relation, tutor_email, birth_date in MOCK_LEGAL_TUTORS:
            existing = app.legal_tutor_service.get_legal_tutors_by_patient_id(patient_ids[email])
            if any(t.email == tutor_email for t in existing):
                print(f"  Skipping {full_name} (already exists)")
                continue
            app.legal_tutor_service.create_legal_tutor({
                "patientId": patient_ids[email],
                "fullName": full_name,
                "phoneNumber": phone,
                "relation": relation,
                "email": tutor_email,
                "birthDate": birth_date,
            })
            print(f"  Created {full_name}")

    print("\nDatabase seeded successfully!")
    print(f"  - {len(MOCK_PATIENTS)} patients")
    print(f"  - {len(MOCK_NOTES)} notes")
    print(f"  - {len(MOCK_EMERGENCY_CONTACTS)} emergency contacts")
    print(f"  - {len(MOCK_LEGAL_TUTORS)} legal tutors")


if __name__ == "__main__":
    seed_database()
