from bson import ObjectId

from models.object_ids import parse_object_id


class Batch:
    def __init__(self, data):
        self._id = data.get('_id', ObjectId())
        self.name = data['name']
        self.course = data.get('course')
        self.students = data.get('students', [])  # Ordered list of user ids

        # Filled in by BatchModel.get_with_roster: [{_id, name, email}]
        self.roster = data.get('roster', [])

    @property
    def id(self):
        return str(self._id)

    def has_student(self, user_id):
        oid = parse_object_id(user_id)
        return oid is not None and oid in self.students

    def to_dict(self):
        return {
            '_id': self._id,
            'name': self.name,
            'course': self.course,
            'students': self.students,
        }


class BatchModel:
    def __init__(self, db):
        self.collection = db.get_collection('batches')
        self.users = db.get_collection('users')

    def create_batch(self, batch_data):
        batch = Batch(batch_data)
        result = self.collection.insert_one(batch.to_dict())
        return str(result.inserted_id)

    def get_by_id(self, batch_id):
        oid = parse_object_id(batch_id)
        if oid is None:
            return None
        batch_data = self.collection.find_one({'_id': oid})
        return Batch(batch_data) if batch_data else None

    def get_with_roster(self, batch_id):
        """
        Get batch with each enrolled student's name and email joined in
        Roster keeps the order of the batch's students list; repeated ids
        and ids with no matching user are dropped
        """
        batch = self.get_by_id(batch_id)
        if not batch:
            return None

        users = self.users.find({'_id': {'$in': batch.students}}, {'name': 1, 'email': 1})
        by_id = {user['_id']: user for user in users}
        batch.roster = []
        for sid in batch.students:
            if sid in by_id:
                batch.roster.append(by_id.pop(sid))
        return batch

    def get_batch_ids_for_student(self, user_id):
        """Ids of every batch the student is enrolled in"""
        oid = parse_object_id(user_id)
        if oid is None:
            return []
        return [b['_id'] for b in self.collection.find({'students': oid}, {'_id': 1})]
