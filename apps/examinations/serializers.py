from rest_framework import serializers
from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password

from .models import Exam, Grade, Question, Subject

User = get_user_model()


class UserRegistrationSerializer(serializers.ModelSerializer):
    """Self-service registration. Always creates a student account."""
    password = serializers.CharField(write_only=True, min_length=8)

    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'first_name', 'last_name', 'password']

    def validate_password(self, value):
        validate_password(value)
        return value

    def create(self, validated_data):
        password = validated_data.pop('password')
        user = User(role=User.Role.STUDENT, **validated_data)
        user.set_password(password)
        user.save()
        return user


class UserWriteSerializer(serializers.ModelSerializer):
    """Administrative user creation and profile updates."""
    password = serializers.CharField(write_only=True, min_length=8, required=False)

    class Meta:
        model = User
        fields = [
            'username', 'email', 'first_name', 'last_name', 'password',
            'role', 'status', 'phone_number',
        ]

    def validate(self, attrs):
        if self.instance is None and not attrs.get('password'):
            raise serializers.ValidationError({'password': 'This field is required.'})
        return attrs

    def create(self, validated_data):
        password = validated_data.pop('password')
        user = User(**validated_data)
        user.set_password(password)
        user.is_active = user.status == User.Status.ACTIVE
        user.save()
        return user

    def update(self, instance, validated_data):
        password = validated_data.pop('password', None)
        for field, value in validated_data.items():
            setattr(instance, field, value)
        if password:
            instance.set_password(password)
        # Deactivated accounts lose their token access
        instance.is_active = instance.status == User.Status.ACTIVE
        instance.save()
        return instance


class GradeSerializer(serializers.ModelSerializer):
    class Meta:
        model = Grade
        fields = ['name', 'description', 'academic_year', 'is_active']


class SubjectSerializer(serializers.ModelSerializer):
    grade = serializers.PrimaryKeyRelatedField(queryset=Grade.objects.all())

    class Meta:
        model = Subject
        fields = ['name', 'code', 'description', 'grade', 'is_active']


class ExamWriteSerializer(serializers.ModelSerializer):
    """
    Exam metadata. Status is driven by publish/archive and is not writable here;
    created_by is taken from the caller at save time.
    """
    subject = serializers.PrimaryKeyRelatedField(queryset=Subject.objects.all())
    grade = serializers.PrimaryKeyRelatedField(queryset=Grade.objects.all())

    class Meta:
        model = Exam
        fields = [
            'title', 'description', 'subject', 'grade', 'duration_minutes', 'passmark',
            'shuffle_questions', 'allow_review', 'show_results', 'start_date',
            'end_date', 'instructions',
        ]

    def validate(self, attrs):
        start_date = attrs.get('start_date', getattr(self.instance, 'start_date', None))
        end_date = attrs.get('end_date', getattr(self.instance, 'end_date', None))
        if start_date and end_date and end_date <= start_date:
            raise serializers.ValidationError({'end_date': 'End date must be after the start date.'})
        return attrs


class QuestionWriteSerializer(serializers.ModelSerializer):
    """
    Question content. The owning exam is supplied at save time, so the
    (exam, question_number) uniqueness is checked by the service.
    """
    options = serializers.ListField(
        child=serializers.CharField(allow_blank=False),
        required=False,
        allow_null=True,
    )

    class Meta:
        model = Question
        fields = [
            'question_number', 'text', 'question_type', 'options', 'correct_answer',
            'points', 'difficulty_level', 'feedback',
        ]

    def validate(self, attrs):
        question_type = attrs.get('question_type', getattr(self.instance, 'question_type', None))
        options = attrs.get('options', getattr(self.instance, 'options', None))
        correct_answer = attrs.get('correct_answer', getattr(self.instance, 'correct_answer', None))

        if question_type == Question.QuestionType.MULTIPLE_CHOICE:
            if not options:
                raise serializers.ValidationError(
                    {'options': 'Multiple choice questions require options array'}
                )
            if correct_answer not in options:
                raise serializers.ValidationError(
                    {'correct_answer': 'The correct answer must be one of the options'}
                )
        return attrs

