from datetime import datetime

from bson import ObjectId

from models.object_ids import parse_object_id


class Course:
    def __init__(self, data):
        self._id = data.get('_id', ObjectId())
        self.name = data['name']
        self.code = data.get('code', '')
        self.created_by = data.get('createdBy')
        self.created_at = data.get('created_at', datetime.utcnow())

    def to_dict(self):
        return {
            '_id': self._id,
            'name': self.name,
            'code': self.code,
            'createdBy': self.created_by,
            'created_at': self.created_at,
        }

    def to_public_dict(self):
        return {
            '_id': str(self._id),
            'name': self.name,
            'code': self.code,
            'createdBy': str(self.created_by) if self.created_by else None,
        }


class CourseModel:
    def __init__(self, db):
        self.collection = db.get_collection('courses')

    def create_course(self, course_data):
        course = Course(course_data)
        result = self.collection.insert_one(course.to_dict())
        return str(result.inserted_id)

    def get_by_id(self, course_id):
        oid = parse_object_id(course_id)
        if oid is None:
            return None
        course_data = self.collection.find_one({'_id': oid})
        return Course(course_data) if course_data else None

    def get_all_courses(self, limit=100):
        courses = self.collection.find().sort('name', 1).limit(limit)
        return [Course(course) for course in courses]
