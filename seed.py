from institute import create_app
from institute import firestore_dao as dao


LEARNING_MODULES = [
    {
        'id': 'html',
        'title': 'HTML Foundations',
        'order': 1,
        'description': 'Learn the structure of the web. Build and structure websites from scratch.',
        'difficulty': 'Beginner',
        'icon': '📄',
        'chapters': [
            {
                'id': 'introduction',
                'title': 'Chapter 1: Introduction to HTML',
                'order': 1,
                'lessons': [
                    {
                        'id': 'what-is-html',
                        'title': 'What is HTML?',
                        'order': 1,
                        'theory': '<h2>What is HTML?</h2><p>HTML (<strong>HyperText Markup Language</strong>) '
                                  'describes the structure of a web page as a tree of elements.</p>',
                    },
                    {
                        'id': 'html-document-structure',
                        'title': 'HTML Document Structure',
                        'order': 2,
                        'theory': '<h2>A Simple HTML Document</h2><p>Every document starts with '
                                  '<code>&lt;!DOCTYPE html&gt;</code>; the visible content lives inside '
                                  '<code>&lt;body&gt;</code>.</p>',
                        'exampleCode': '<!DOCTYPE html>\n<html>\n<head>\n  <title>Page Title</title>\n</head>\n'
                                       '<body>\n  <h1>My First Heading</h1>\n  <p>My first paragraph.</p>\n'
                                       '</body>\n</html>',
                        'practiceTask': 'Create a page with a title, one heading and one paragraph.',
                    },
                ],
            },
            {
                'id': 'basic-elements',
                'title': 'Chapter 2: Basic HTML Elements',
                'order': 2,
                'lessons': [
                    {
                        'id': 'headings',
                        'title': 'Headings',
                        'order': 1,
                        'theory': '<h2>HTML Headings</h2><p>Headings run from <code>&lt;h1&gt;</code> '
                                  '(most important) to <code>&lt;h6&gt;</code>.</p>',
                        'exampleCode': '<h1>Heading 1</h1>\n<h2>Heading 2</h2>\n<h3>Heading 3</h3>',
                    },
                    {
                        'id': 'paragraphs',
                        'title': 'Paragraphs',
                        'order': 2,
                        'theory': '<h2>Paragraphs</h2><p>The <code>&lt;p&gt;</code> element defines a paragraph.</p>',
                    },
                    {
                        'id': 'links',
                        'title': 'Links',
                        'order': 3,
                        'theory': '<h2>Links</h2><p>Links are defined with <code>&lt;a href="..."&gt;</code>.</p>',
                        'exampleCode': '<a href="https://mtechitinstitute.in">Visit MTech IT Institute</a>',
                    },
                    {
                        'id': 'images',
                        'title': 'Images',
                        'order': 4,
                        'theory': '<h2>Images</h2><p><code>&lt;img&gt;</code> needs <code>src</code> and '
                                  '<code>alt</code> attributes.</p>',
                        'practiceTask': 'Add an image with a meaningful alt text to your page.',
                    },
                ],
            },
            {
                'id': 'lists',
                'title': 'Chapter 3: Lists',
                'order': 3,
                'lessons': [
                    {
                        'id': 'unordered-lists',
                        'title': 'Unordered Lists',
                        'order': 1,
                        'theory': '<h2>Unordered Lists</h2><p><code>&lt;ul&gt;</code> with '
                                  '<code>&lt;li&gt;</code> items renders bullets.</p>',
                    },
                    {
                        'id': 'ordered-lists',
                        'title': 'Ordered Lists',
                        'order': 2,
                        'theory': '<h2>Ordered Lists</h2><p><code>&lt;ol&gt;</code> numbers its items.</p>',
                    },
                ],
            },
        ],
    },
    {
        'id': 'css',
        'title': 'CSS Styling',
        'order': 2,
        'description': 'Style your pages with colors, layouts and typography.',
        'difficulty': 'Beginner',
        'icon': '🎨',
        'chapters': [
            {
                'id': 'introduction',
                'title': 'Chapter 1: Introduction to CSS',
                'order': 1,
                'lessons': [
                    {
                        'id': 'what-is-css',
                        'title': 'What is CSS?',
                        'order': 1,
                        'theory': '<h2>What is CSS?</h2><p>CSS (Cascading Style Sheets) describes how '
                                  'HTML elements are displayed.</p>',
                    },
                    {
                        'id': 'css-syntax',
                        'title': 'CSS Syntax',
                        'order': 2,
                        'theory': '<h2>CSS Syntax</h2><p>A rule is a selector followed by a declaration block.</p>',
                        'exampleCode': 'p {\n  color: red;\n  text-align: center;\n}',
                    },
                ],
            },
            {
                'id': 'selectors-and-colors',
                'title': 'Chapter 2: Selectors and Colors',
                'order': 2,
                'lessons': [
                    {
                        'id': 'selectors',
                        'title': 'Selectors',
                        'order': 1,
                        'theory': '<h2>Selectors</h2><p>Select elements by tag, <code>.class</code> or '
                                  '<code>#id</code>.</p>',
                    },
                    {
                        'id': 'colors',
                        'title': 'Colors',
                        'order': 2,
                        'theory': '<h2>Colors</h2><p>Colors can be names, HEX, RGB or HSL values.</p>',
                        'practiceTask': 'Give every heading on your page a different color.',
                    },
                ],
            },
        ],
    },
    {
        'id': 'javascript',
        'title': 'JavaScript Essentials',
        'order': 3,
        'description': 'Make your websites interactive.',
        'difficulty': 'Intermediate',
        'icon': '⚡',
        'chapters': [],
    },
    {
        'id': 'python',
        'title': 'Python for Beginners',
        'order': 4,
        'description': 'Start programming with a friendly, general-purpose language.',
        'difficulty': 'Beginner',
        'icon': '🐍',
        'chapters': [],
    },
    {
        'id': 'sql',
        'title': 'SQL Database Basics',
        'order': 5,
        'description': 'Store and query data with relational databases.',
        'difficulty': 'Intermediate',
        'icon': '🗄️',
        'chapters': [],
    },
]

STUDENT_EXAM_CATEGORY = {
    'id': 'student-exam',
    'name': 'Student Exam',
    'description': 'Official exams for registered students.',
}

SAMPLE_EXAM = {
    'id': 'computer-fundamentals-exam',
    'title': 'Computer Fundamentals Exam',
    'description': 'Basic computer, internet and web questions.',
    'duration': 10,
    'isPublished': True,
    'categoryId': STUDENT_EXAM_CATEGORY['id'],
    'categoryName': STUDENT_EXAM_CATEGORY['name'],
    'questions': [
        {
            'id': 'q1',
            'questionText': 'What does HTML stand for?',
            'options': ['HyperText Markup Language', 'High Transfer Machine Language',
                        'Hyperlink Text Management Language', 'Home Tool Markup Language'],
            'correctOption': 0,
            'marks': 2,
        },
        {
            'id': 'q2',
            'questionText': 'Which part of a computer is called its brain?',
            'options': ['Monitor', 'CPU', 'Keyboard', 'Printer'],
            'correctOption': 1,
            'marks': 2,
        },
        {
            'id': 'q3',
            'questionText': 'Which CSS property changes text color?',
            'options': ['font-color', 'text-color', 'color', 'foreground'],
            'correctOption': 2,
            'marks': 2,
            'explanation': 'The color property sets the foreground color of text.',
        },
        {
            'id': 'q4',
            'questionText': 'Which shortcut copies selected text?',
            'options': ['Ctrl + V', 'Ctrl + X', 'Ctrl + Z', 'Ctrl + C'],
            'correctOption': 3,
            'marks': 2,
        },
        {
            'id': 'q5',
            'questionText': 'Which of these is a web browser?',
            'options': ['Chrome', 'Excel', 'Windows', 'Tally'],
            'correctOption': 0,
            'marks': 2,
        },
    ],
}


def seed_learning_modules():
    for module in LEARNING_MODULES:
        chapters = module.get('chapters', [])
        dao.set_learning_module(module['id'], {
            k: v for k, v in module.items() if k not in ('id', 'chapters')
        })
        for chapter in chapters:
            dao.set_chapter(module['id'], chapter['id'], {
                'title': chapter['title'],
                'order': chapter['order'],
            })
            for lesson in chapter['lessons']:
                dao.set_lesson(module['id'], chapter['id'], lesson['id'], {
                    k: v for k, v in lesson.items() if k != 'id'
                })
        print(f"  {module['title']}: {sum(len(c['lessons']) for c in chapters)} lessons")


def seed_exam():
    dao.set_test_category(STUDENT_EXAM_CATEGORY['id'], {
        k: v for k, v in STUDENT_EXAM_CATEGORY.items() if k != 'id'
    })
    exam = {k: v for k, v in SAMPLE_EXAM.items() if k != 'id'}
    exam['totalMarks'] = sum(q.get('marks', 1) for q in SAMPLE_EXAM['questions'])
    dao.set_mock_test(SAMPLE_EXAM['id'], exam)
    print(f"  {SAMPLE_EXAM['title']}: {len(SAMPLE_EXAM['questions'])} questions, {exam['totalMarks']} marks")


def seed_database():
    app = create_app()
    with app.app_context():
        print("Creating learning modules...")
        seed_learning_modules()

        print("Creating Student Exam category and sample exam...")
        seed_exam()

        print("Database seeding complete!")


if __name__ == '__main__':
    seed_database()
