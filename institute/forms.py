from flask_wtf import FlaskForm
from wtforms import StringField, PasswordField, TextAreaField, SelectField, IntegerField, SubmitField, DateField
from wtforms.validators import DataRequired, Email, Length, EqualTo, NumberRange, Regexp, ValidationError, Optional


class ContactForm(FlaskForm):
    name = StringField('Name', validators=[DataRequired(message='Name is required.'), Length(min=2, message='Name must be at least 2 characters.')])
    email = StringField('Email', validators=[DataRequired(message='Email is required.'), Email(message='Please enter a valid email address.')])
    message = TextAreaField('Message', validators=[DataRequired(message='Message is required.'), Length(min=10, message='Message must be at least 10 characters.')])
    submit = SubmitField('Send Message')


class EnrollmentForm(FlaskForm):
    name = StringField('Name', validators=[DataRequired(message='Name is required.'), Length(min=2, message='Name must be at least 2 characters.')])
    email = StringField('Email', validators=[DataRequired(message='Email is required.'), Email(message='Please enter a valid email address.')])
    phone = StringField('Phone', validators=[DataRequired(message='Phone number is required.')])
    message = TextAreaField('Message', validators=[Optional()])
    submit = SubmitField('Apply Now')

    def validate_phone(self, phone):
        cleaned = ''.join(filter(str.isdigit, phone.data or ''))
        if len(cleaned) < 10:
            raise ValidationError('Phone number must be at least 10 digits.')


class ReviewForm(FlaskForm):
    name = StringField('Name', validators=[DataRequired(message='Name is required.'), Length(min=2, message='Name must be at least 2 characters.')])
    rating = IntegerField('Rating', validators=[DataRequired(message='Please choose a rating.'), NumberRange(min=1, max=5, message='Rating must be between 1 and 5.')])
    comment = TextAreaField('Review', validators=[DataRequired(message='Review is required.'), Length(min=10, message='Review must be at least 10 characters.')])
    submit = SubmitField('Submit Review')


class ResultLookupForm(FlaskForm):
    registration_number = StringField('Registration Number', validators=[DataRequired(message='Please enter a valid registration number.'), Length(min=5, message='Please enter a valid registration number.')])
    submit = SubmitField('Check Result')


class CertificateVerifyForm(FlaskForm):
    certificate_id = StringField('Certificate ID', validators=[DataRequired(message='Please enter a valid Certificate ID.'), Length(min=5, message='Please enter a valid Certificate ID.')])
    submit = SubmitField('Verify')


class ExamStartForm(FlaskForm):
    registration_number = StringField('Registration Number', validators=[DataRequired(message='Please enter your registration number.'), Length(min=5, message='Please enter a valid registration number.')])
    submit = SubmitField('Verify')


class ExamRegistrationForm(FlaskForm):
    full_name = StringField('Full Name', validators=[DataRequired(message='Full name is required.'), Length(min=3, message='Full name must be at least 3 characters.')])
    father_name = StringField("Father's Name", validators=[DataRequired(message="Father's name is required."), Length(min=3, message="Father's name must be at least 3 characters.")])
    phone = StringField('Phone', validators=[DataRequired(message='Phone number is required.'), Regexp(r'^\d{10}$', message='Please enter a valid 10-digit phone number.')])
    email = StringField('Email', validators=[DataRequired(message='Email is required.'), Email(message='Please enter a valid email address.')])
    dob = DateField('Date of Birth', validators=[DataRequired(message='Date of birth is required.')])
    gender = SelectField('Gender', choices=[('Male', 'Male'), ('Female', 'Female'), ('Other', 'Other')])
    course = SelectField('Course', choices=[], validators=[DataRequired(message='Please select a course.')])
    address = StringField('Address', validators=[DataRequired(message='Address is required.'), Length(min=5, message='Address must be at least 5 characters.')])
    city = StringField('City', default='Patti', validators=[DataRequired(message='City is required.'), Length(min=2, message='City is required.')])
    state = StringField('State', default='Uttar Pradesh', validators=[DataRequired(message='State is required.'), Length(min=2, message='State is required.')])
    pin_code = StringField('Pin Code', default='230135', validators=[DataRequired(message='Pin code is required.'), Length(min=6, max=6, message='Pin code must be 6 digits.')])
    submit = SubmitField('Register')


class LoginForm(FlaskForm):
    email = StringField('Email', validators=[DataRequired(message='Email is required.'), Email(message='Please enter a valid email address.')])
    password = PasswordField('Password', validators=[DataRequired(message='Password is required.')])
    submit = SubmitField('Log In')


class SignupForm(FlaskForm):
    display_name = StringField('Name', validators=[DataRequired(message='Name is required.'), Length(min=2, max=120)])
    email = StringField('Email', validators=[DataRequired(message='Email is required.'), Email(message='Please enter a valid email address.')])
    password = PasswordField('Password', validators=[DataRequired(message='Password is required.'), Length(min=6, message='Password must be at least 6 characters.')])
    confirm_password = PasswordField('Confirm Password', validators=[DataRequired(message='Please confirm your password.'), EqualTo('password', message='Passwords do not match.')])
    submit = SubmitField('Sign Up')
