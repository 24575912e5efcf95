import io
import json
from datetime import datetime, timedelta

from bson import ObjectId

PDF_BYTES = b'%PDF-1.4\n% test paper\n%%EOF\n'


def exam_body(seed, **overrides):
    start = datetime.utcnow() + timedelta(days=1)
    body = {
        'title': 'Final Exam',
        'course': seed['course_id'],
        'batch': seed['batch_id'],
        'startTime': start.isoformat() + 'Z',
        'endTime': (start + timedelta(hours=3)).isoformat() + 'Z',
        'questions': [{'questionText': 'Prove it.', 'maxMarks': 10}],
        'k': 2,
        'createdBy': seed['teacher_id'],
    }
    body.update(overrides)
    return body


def test_health(client):
    response = client.get('/api/health')
    assert response.get_json() == {"status": "healthy", "database": "connected"}


def test_create_exam_from_json(client, context, seed):
    response = client.post('/api/teacher/exams', json=exam_body(seed))

    assert response.status_code == 201
    exam = context.exams.get_by_id(response.get_json()['examId'])
    assert exam.title == 'Final Exam'
    assert exam.num_questions == 1
    assert exam.k == 2
    assert exam.batch == ObjectId(seed['batch_id'])
    assert exam.question_paper_pdf is None


def test_create_exam_with_uploaded_pdfs(client, context, seed):
    response = client.post('/api/teacher/exams', data={
        'data': json.dumps(exam_body(seed)),
        'questionPaper': (io.BytesIO(PDF_BYTES), 'paper.pdf', 'application/pdf'),
        'answerKey': (io.BytesIO(PDF_BYTES), 'key.pdf', 'application/pdf'),
    }, content_type='multipart/form-data')

    assert response.status_code == 201
    exam = context.exams.get_by_id(response.get_json()['examId'])
    assert exam.question_paper_pdf == PDF_BYTES
    assert exam.answer_key_mime_type == 'application/pdf'


def test_create_exam_rejects_non_pdf_upload(client, seed):
    response = client.post('/api/teacher/exams', data={
        'data': json.dumps(exam_body(seed)),
        'questionPaper': (io.BytesIO(b'hello'), 'paper.txt', 'text/plain'),
    }, content_type='multipart/form-data')

    assert response.status_code == 400
    assert response.get_json() == {"message": "questionPaper must be a PDF file"}


def test_create_exam_validation(client, seed):
    cases = [
        (exam_body(seed, title=''), "Missing required fields: title"),
        (exam_body(seed, k=0), "k must be at least 1"),
        (exam_body(seed, course='nope'), "course is not a valid id"),
        (exam_body(seed, endTime='2000-01-01T00:00:00Z'), "startTime must be before endTime"),
        (exam_body(seed, startTime='tomorrow'), "startTime must be an ISO-8601 date-time"),
        (exam_body(seed, questions=[{'questionText': 'Q', 'maxMarks': -1}]),
         "Question 1 maxMarks must be positive"),
        (exam_body(seed, numQuestions=4), "numQuestions does not match the questions given"),
    ]
    for body, message in cases:
        response = client.post('/api/teacher/exams', json=body)
        assert response.status_code == 400, message
        assert response.get_json() == {"message": message}


def test_create_exam_unknown_batch(client, seed):
    response = client.post('/api/teacher/exams', json=exam_body(seed, batch=str(ObjectId())))
    assert response.status_code == 404
    assert response.get_json() == {"message": "Batch not found"}


def test_get_exam_hides_binaries(client, seed):
    response = client.get(f"/api/teacher/exams/{seed['exam_id']}")

    exam = response.get_json()['exam']
    assert exam['title'] == 'Midterm 1'
    assert exam['course']['name'] == 'CS101'
    assert exam['batch']['name'] == 'Batch A'
    assert exam['maxMarks'] == [5, 10]
    assert exam['hasQuestionPaper'] is True
    assert exam['hasAnswerKey'] is False
    assert 'questionPaperPdf' not in exam


def test_create_batch(client, context, seed):
    response = client.post('/api/teacher/batches', json={
        'name': 'Batch B',
        'course': seed['course_id'],
        'students': [seed['bob_id'], seed['bob_id'], seed['outsider_id']],
    })

    assert response.status_code == 201
    batch = context.batches.get_by_id(response.get_json()['batchId'])
    assert batch.students == [ObjectId(seed['bob_id']), ObjectId(seed['outsider_id'])]


def test_create_batch_unknown_student(client, seed):
    missing = str(ObjectId())
    response = client.post('/api/teacher/batches', json={'name': 'B', 'students': [missing]})
    assert response.status_code == 400
    assert response.get_json() == {"message": f"Student {missing} not found"}


def test_courses_and_users(client):
    response = client.post('/api/courses', json={'name': 'Databases', 'code': 'CS202'})
    assert response.status_code == 201
    names = [c['name'] for c in client.get('/api/courses').get_json()['courses']]
    assert names == ['Databases']

    response = client.post('/api/users', json={'name': 'Ann', 'email': 'Ann@x.edu', 'role': 'student'})
    assert response.status_code == 201
    duplicate = client.post('/api/users', json={'name': 'Ann', 'email': 'ann@x.edu', 'role': 'student'})
    assert duplicate.status_code == 400
    bad_role = client.post('/api/users', json={'name': 'Bo', 'email': 'bo@x.edu', 'role': 'admin'})
    assert bad_role.status_code == 400


def test_unknown_route_is_json(client):
    response = client.get('/api/nothing-here')
    assert response.status_code == 404
    assert 'message' in response.get_json()
