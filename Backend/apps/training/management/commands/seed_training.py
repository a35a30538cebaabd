from django.core.management.base import BaseCommand
from django.db import transaction

from apps.training.models import Module, Question


def _question(text, options, correct):
    option_a, option_b, option_c, option_d = options
    return {
        'question_text': text,
        'option_a': option_a,
        'option_b': option_b,
        'option_c': option_c,
        'option_d': option_d,
        'correct_answer': correct,
    }


MODULES = [
    {
        'order_number': 1,
        'title': 'What is Artificial Intelligence?',
        'description': 'The core ideas behind AI, machine learning and the tools you meet at work every day.',
        'embed_url': 'https://gamma.app/embed/ai-academy-module-1',
        'questions': [
            _question(
                'Which description fits artificial intelligence best?',
                [
                    'Software that performs tasks which normally require human intelligence',
                    'A robot with a human body',
                    'Any program that runs on the internet',
                    'A database of facts',
                ],
                'A',
            ),
            _question(
                'What is machine learning?',
                [
                    'Writing every rule by hand',
                    'Repairing machines with software',
                    'Systems that learn patterns from data instead of explicit rules',
                    'Teaching people to use computers',
                ],
                'C',
            ),
            _question(
                'Which of these is an everyday example of AI?',
                [
                    'A calculator',
                    'Spam filtering in your mailbox',
                    'A printed timetable',
                    'A light switch',
                ],
                'B',
            ),
            _question(
                'What does an AI model need to learn?',
                [
                    'A fast monitor',
                    'A keyboard',
                    'An internet connection only',
                    'Training data',
                ],
                'D',
            ),
            _question(
                'Narrow AI is...',
                [
                    'AI built for one specific kind of task',
                    'AI that can do anything a human can',
                    'AI that only runs on small devices',
                    'AI without any data',
                ],
                'A',
            ),
        ],
    },
    {
        'order_number': 2,
        'title': 'Generative AI and Large Language Models',
        'description': 'How chatbots and text generators work, and where their limits are.',
        'embed_url': 'https://gamma.app/embed/ai-academy-module-2',
        'questions': [
            _question(
                'What does a large language model do at its core?',
                [
                    'Look up answers in an encyclopedia',
                    'Predict the most likely next piece of text',
                    'Copy text from websites',
                    'Translate only between two languages',
                ],
                'B',
            ),
            _question(
                'What is a "hallucination" in generative AI?',
                [
                    'A visual effect in images',
                    'A crash of the application',
                    'A confident answer that is factually wrong',
                    'A very long answer',
                ],
                'C',
            ),
            _question(
                'Which output can generative AI create?',
                [
                    'Only text',
                    'Only images',
                    'Only code',
                    'Text, images, audio and code',
                ],
                'D',
            ),
            _question(
                'Why should you check facts in AI-generated text?',
                [
                    'Models can produce plausible but incorrect information',
                    'AI text is always outdated',
                    'It is required by the keyboard',
                    'AI never uses facts',
                ],
                'A',
            ),
            _question(
                'What is a "token" for a language model?',
                [
                    'A password',
                    'A small chunk of text the model processes',
                    'A payment for the service',
                    'A type of image',
                ],
                'B',
            ),
        ],
    },
    {
        'order_number': 3,
        'title': 'Writing Effective Prompts',
        'description': 'Get better results by giving AI tools clear context, a role and a format.',
        'embed_url': 'https://gamma.app/embed/ai-academy-module-3',
        'questions': [
            _question(
                'Which prompt will most likely give the best result?',
                [
                    'Write something.',
                    'Text please',
                    'Write a 150-word summary of this report for a non-technical manager.',
                    'Help',
                ],
                'C',
            ),
            _question(
                'Why give the AI a role, such as "You are an HR advisor"?',
                [
                    'It makes the AI faster',
                    'It steers tone and expertise of the answer',
                    'It is required to log in',
                    'It removes all mistakes',
                ],
                'B',
            ),
            _question(
                'What is a good next step when an answer is not what you wanted?',
                [
                    'Refine the prompt with more context or constraints',
                    'Give up on the tool',
                    'Repeat the same prompt word for word',
                    'Restart your computer',
                ],
                'A',
            ),
            _question(
                'Asking for a specific output format (table, bullet list) helps because...',
                [
                    'It hides errors',
                    'The AI otherwise refuses',
                    'It is cheaper',
                    'The result is easier to use directly',
                ],
                'D',
            ),
            _question(
                'What are "examples" in a prompt used for?',
                [
                    'To make the prompt longer',
                    'To show the model the pattern you expect',
                    'To test the internet connection',
                    'They have no effect',
                ],
                'B',
            ),
        ],
    },
    {
        'order_number': 4,
        'title': 'AI in Your Daily Work',
        'description': 'Practical use cases: drafting, summarising, analysing and planning with AI.',
        'embed_url': 'https://gamma.app/embed/ai-academy-module-4',
        'questions': [
            _question(
                'Which task is well suited for an AI assistant?',
                [
                    'Signing contracts on your behalf',
                    'Making final hiring decisions',
                    'Drafting a first version of an email',
                    'Approving payments',
                ],
                'C',
            ),
            _question(
                'Who is responsible for work produced with the help of AI?',
                [
                    'You, the person who uses and shares it',
                    'The AI vendor',
                    'Nobody',
                    'The IT department',
                ],
                'A',
            ),
            _question(
                'How can AI help with a long document?',
                [
                    'By deleting it',
                    'By summarising the key points',
                    'By printing it',
                    'By making it longer',
                ],
                'B',
            ),
            _question(
                'What is a sensible way to introduce AI in a team process?',
                [
                    'Replace the whole process at once',
                    'Ban discussion about it',
                    'Use it without telling anyone',
                    'Start with a small pilot and evaluate the results',
                ],
                'D',
            ),
            _question(
                'AI output for a customer should be...',
                [
                    'Reviewed by a person before sending',
                    'Sent immediately',
                    'Never used',
                    'Translated twice',
                ],
                'A',
            ),
        ],
    },
    {
        'order_number': 5,
        'title': 'Privacy, Security and Data',
        'description': 'What you can and cannot share with AI tools, and why.',
        'embed_url': 'https://gamma.app/embed/ai-academy-module-5',
        'questions': [
            _question(
                'Which information should you NOT paste into a public AI tool?',
                [
                    'A public news article',
                    'Personal data of customers',
                    'A generic cooking recipe',
                    'A public product description',
                ],
                'B',
            ),
            _question(
                'Why can sharing data with an AI service be risky?',
                [
                    'The data may be stored or used to train models',
                    'The data gets deleted from your computer',
                    'It slows down your laptop',
                    'It changes the data',
                ],
                'A',
            ),
            _question(
                'What should you do before using a new AI tool for work data?',
                [
                    'Nothing, all tools are safe',
                    'Ask a friend',
                    'Check whether the tool is approved by your organisation',
                    'Install it on every device',
                ],
                'C',
            ),
            _question(
                'Which regulation protects personal data in the EU?',
                [
                    'HTML',
                    'USB',
                    'HTTP',
                    'GDPR',
                ],
                'D',
            ),
            _question(
                'Anonymising data before using AI means...',
                [
                    'Removing details that can identify a person',
                    'Encrypting the AI tool',
                    'Using a fake account',
                    'Sharing data at night',
                ],
                'A',
            ),
        ],
    },
    {
        'order_number': 6,
        'title': 'Ethics and Responsible AI',
        'description': 'Bias, transparency and making fair decisions when AI is involved.',
        'embed_url': 'https://gamma.app/embed/ai-academy-module-6',
        'questions': [
            _question(
                'Where does bias in AI systems usually come from?',
                [
                    'The colour of the screen',
                    'The speed of the processor',
                    'The training data and how the system was designed',
                    'The length of the prompt',
                ],
                'C',
            ),
            _question(
                'What does transparency about AI use mean?',
                [
                    'Being open about when and how AI was used',
                    'Using a transparent screen',
                    'Publishing all passwords',
                    'Only using free tools',
                ],
                'A',
            ),
            _question(
                'Which decision should never be left to AI alone?',
                [
                    'Choosing a font',
                    'Sorting an email folder',
                    'Suggesting meeting times',
                    'Decisions with major impact on people, like dismissals',
                ],
                'D',
            ),
            _question(
                'What is "human in the loop"?',
                [
                    'A person reviews and can correct AI decisions',
                    'A person inside the computer',
                    'A training video',
                    'An AI that imitates humans',
                ],
                'A',
            ),
            _question(
                'What should you do when you notice unfair AI output?',
                [
                    'Ignore it',
                    'Report it and do not use the output',
                    'Share it widely',
                    'Delete the tool from all computers',
                ],
                'B',
            ),
        ],
    },
]


class Command(BaseCommand):
    help = 'Seed the six AI Academy modules with their quiz questions'

    @transaction.atomic
    def handle(self, *args, **options):
        for module_data in MODULES:
            module_data = dict(module_data)
            questions_data = module_data.pop('questions')

            module, created = Module.objects.update_or_create(
                order_number=module_data['order_number'],
                defaults=module_data,
            )

            status_label = 'Created' if created else 'Updated'
            self.stdout.write(f'{status_label}: {module}')

            # Clear and recreate questions for idempotency
            Question.objects.filter(module=module).delete()

            for number, q_data in enumerate(questions_data, start=1):
                Question.objects.create(module=module, order_number=number, **q_data)

            self.stdout.write(f'  + {len(questions_data)} questions added')

        self.stdout.write(
            self.style.SUCCESS('\nCourse modules seeded successfully!')
        )
