"""
Full workflow over HTTP: assignment, acceptance, submission, scrutiny routing,
request acceptance and verdict.
"""
import pytest

from conftest import ADMIN, DEADLINE, FACULTY, PART_A, PART_B, PART_C, auth_headers, faculty


@pytest.mark.asyncio
async def test_setter_to_approved_scenario(client):
    admin = auth_headers(ADMIN)
    f1 = auth_headers(faculty("F1"))
    f2 = auth_headers(faculty("F2"))

    for faculty_id, name in FACULTY.items():
        response = await client.post("/api/faculty", headers=admin, json={"facultyId": faculty_id, "fullName": name})
        assert response.status_code == 201

    # Admin offers CS101 to F1 as setter
    response = await client.post("/api/assignments", headers=admin, json={
        "facultyId": "F1",
        "facultyName": "Asha Rao",
        "subjectCode": "CS101",
        "subjectName": "Data Structures",
        "regulation": "R2021",
        "role": "Setter",
        "deadlineDate": DEADLINE,
    })
    assert response.status_code == 201
    assert response.json()["assignedBy"] == "exam-cell"

    # F1 accepts
    response = await client.post("/api/responses", headers=f1, json={
        "facultyId": "F1", "subjectCode": "CS101", "role": "Setter", "decision": "yes"
    })
    assert response.status_code == 200
    assert response.json()["assignment"]["isAssigned"] is True

    # F1 submits the paper
    response = await client.post("/api/question-papers", headers=f1, json={
        "facultyId": "F1",
        "subjectCode": "CS101",
        "role": "Setter",
        "examName": "End Semester Examination",
        "department": "Computer Science and Engineering",
        "semester": "III",
        "subjectTitle": "Data Structures",
        "regulation": "R2021",
        "time": "3 Hours",
        "maxMarks": 100,
        "partA": PART_A,
        "partB": PART_B,
        "partC": PART_C,
    })
    assert response.status_code == 201
    paper_id = response.json()["id"]

    assignments = (await client.get("/api/assignments", headers=admin, params={"facultyId": "F1"})).json()
    assert assignments["assignments"][0]["questionPaperStatus"] == "submitted"

    # Admin routes it to F2
    response = await client.post(
        f"/api/scrutiny/{paper_id}/assign",
        headers=admin,
        json={"scrutinizerId": "F2", "scrutinizerName": "Vikram Nair"}
    )
    assert response.status_code == 200
    assert response.json()["questionPaper"]["scrutinyRequestStatus"] == "pending"

    requests = (await client.get("/api/scrutiny/requests", headers=f2)).json()
    assert [p["id"] for p in requests["questionPapers"]] == [paper_id]

    # F2 can read the paper once routed
    assert (await client.get(f"/api/question-papers/{paper_id}", headers=f2)).status_code == 200

    # F2 accepts the request
    response = await client.post(f"/api/scrutiny/{paper_id}/respond", headers=f2, json={"response": "accepted"})
    assert response.status_code == 200

    work = (await client.get("/api/scrutiny/assigned", headers=f2)).json()
    assert [p["id"] for p in work["questionPapers"]] == [paper_id]

    # F2 approves
    response = await client.post(
        f"/api/scrutiny/{paper_id}/verdict",
        headers=f2,
        json={"remarks": "looks good", "verdict": "approved"}
    )
    assert response.status_code == 200
    final = response.json()["questionPaper"]
    assert final["scrutinyStatus"] == "approved"
    assert final["scrutinyRemarks"] == "looks good"

    # Verdict is terminal
    response = await client.post(
        f"/api/scrutiny/{paper_id}/verdict",
        headers=f2,
        json={"remarks": "second thoughts", "verdict": "rejected"}
    )
    assert response.status_code == 400
    assert response.json()["code"] == "ALREADY_SCRUTINIZED"

    paper = (await client.get(f"/api/question-papers/{paper_id}", headers=f1)).json()
    assert paper["scrutinyStatus"] == "approved"
    assert paper["scrutinyRemarks"] == "looks good"

    assignments = (await client.get("/api/assignments", headers=f1)).json()
    assert assignments["assignments"][0]["questionPaperStatus"] == "approved"
    assert (await client.get("/api/scrutiny/assigned", headers=f2)).json()["count"] == 0
